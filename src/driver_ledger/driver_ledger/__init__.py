"""Driver Attendance Ledger package.

Feature modules (ledger, overtime, sheets, notifications) sit behind a thin
Flask controller layer; the ledger itself is persisted in a month-partitioned
spreadsheet.
"""
