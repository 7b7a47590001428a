from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Optional, Sequence

from googleapiclient.errors import HttpError

from ..core.exceptions import StorageUnavailable
from .connection import SheetsConnection
from .ranges import format_range
from .store import Matrix, RangeUpdate, SheetStore

logger = logging.getLogger("driver_ledger.sheets.google")

_UPDATED_ROW = re.compile(r"![A-Z]+(\d+)")


@contextmanager
def sheets_call(operation: str, segment_id: str = ""):
    try:
        yield
    except HttpError as e:
        logger.error("Sheets %s failed for %r: %s", operation, segment_id, e)
        raise StorageUnavailable(f"{operation} failed for {segment_id!r}: {e}") from e
    except (OSError, TimeoutError) as e:
        logger.error("Sheets %s transport error for %r: %s", operation, segment_id, e)
        raise StorageUnavailable(f"{operation} failed for {segment_id!r}: {e}") from e


def _stringify(values) -> Matrix:
    return [["" if v is None else str(v) for v in row] for row in (values or [])]


class GoogleSheetsStore(SheetStore):
    def __init__(self, conn: SheetsConnection):
        self._conn = conn

    @property
    def _values(self):
        return self._conn.service().spreadsheets().values()

    def get_values(self, segment_id: str, range_spec: str) -> Matrix:
        with sheets_call("get", segment_id):
            response = self._values.get(
                spreadsheetId=self._conn.spreadsheet_id,
                range=format_range(segment_id, range_spec),
            ).execute()
        return _stringify(response.get("values"))

    def update_values(self, segment_id: str, range_spec: str, values: Matrix) -> None:
        with sheets_call("update", segment_id):
            self._values.update(
                spreadsheetId=self._conn.spreadsheet_id,
                range=format_range(segment_id, range_spec),
                valueInputOption="RAW",
                body={"values": values},
            ).execute()

    def batch_update_values(self, segment_id: str, updates: Sequence[RangeUpdate]) -> None:
        if not updates:
            return
        with sheets_call("batchUpdate", segment_id):
            self._values.batchUpdate(
                spreadsheetId=self._conn.spreadsheet_id,
                body={
                    "valueInputOption": "RAW",
                    "data": [
                        {"range": format_range(segment_id, u.range_spec), "values": u.values}
                        for u in updates
                    ],
                },
            ).execute()

    def append_row(self, segment_id: str, range_spec: str, row: Sequence[str]) -> Optional[int]:
        with sheets_call("append", segment_id):
            response = self._values.append(
                spreadsheetId=self._conn.spreadsheet_id,
                range=format_range(segment_id, range_spec),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(row)]},
            ).execute()
        updated = (response.get("updates") or {}).get("updatedRange", "")
        m = _UPDATED_ROW.search(updated)
        return int(m.group(1)) if m else None

    def _spreadsheet(self):
        return self._conn.service().spreadsheets()

    def list_segments(self) -> list[str]:
        with sheets_call("list"):
            response = self._spreadsheet().get(
                spreadsheetId=self._conn.spreadsheet_id,
                fields="sheets.properties(title,sheetId)",
            ).execute()
        return [s["properties"]["title"] for s in response.get("sheets", [])]

    def _sheet_id(self, segment_id: str) -> Optional[int]:
        with sheets_call("list", segment_id):
            response = self._spreadsheet().get(
                spreadsheetId=self._conn.spreadsheet_id,
                fields="sheets.properties(title,sheetId)",
            ).execute()
        for s in response.get("sheets", []):
            if s["properties"]["title"] == segment_id:
                return int(s["properties"]["sheetId"])
        return None

    def add_segment(self, segment_id: str) -> None:
        with sheets_call("addSheet", segment_id):
            self._spreadsheet().batchUpdate(
                spreadsheetId=self._conn.spreadsheet_id,
                body={"requests": [{"addSheet": {"properties": {"title": segment_id}}}]},
            ).execute()

    def delete_segment(self, segment_id: str) -> None:
        sheet_id = self._sheet_id(segment_id)
        if sheet_id is None:
            return
        with sheets_call("deleteSheet", segment_id):
            self._spreadsheet().batchUpdate(
                spreadsheetId=self._conn.spreadsheet_id,
                body={"requests": [{"deleteSheet": {"sheetId": sheet_id}}]},
            ).execute()
