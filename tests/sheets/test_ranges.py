import pytest

from src.driver_ledger.driver_ledger.sheets.ranges import CellRange, column_index, column_letter, format_range, row_span


@pytest.mark.parametrize("index, letter", [(1, "A"), (11, "K"), (26, "Z"), (27, "AA"), (52, "AZ")])
def test_column_letter_round_trip(index, letter):
    assert column_letter(index) == letter
    assert column_index(letter) == index


def test_format_range_quotes_segment():
    assert format_range("August 2025 Attendance", "A1:K1") == "'August 2025 Attendance'!A1:K1"
    assert format_range("Driver's log", "A:J") == "'Driver''s log'!A:J"


def test_cell_range_parse():
    assert CellRange.parse("A:K") == CellRange(first_col=1, last_col=11, first_row=None, last_row=None)
    assert CellRange.parse("'X'!D5") == CellRange(first_col=4, last_col=4, first_row=5, last_row=5)
    assert CellRange.parse(row_span("A", "J", 7)) == CellRange(first_col=1, last_col=10, first_row=7, last_row=7)
    with pytest.raises(ValueError):
        CellRange.parse("5:7")
