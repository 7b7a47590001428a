from __future__ import annotations

from typing import Optional

from ..core.constants import FIRST_DATA_ROW
from ..core.exceptions import ValidationError
from .datetime_utils import parse_clock_time


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_clock_time(value, field_name: str) -> Optional[str]:
    """Empty -> None, otherwise normalized ``HH:MM``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return parse_clock_time(value)
    except ValidationError as e:
        raise ValidationError(f"{field_name}: {e}") from e


def require_data_row(row_number) -> int:
    try:
        row = int(row_number)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Row number must be an integer: {row_number!r}") from e
    if row < FIRST_DATA_ROW:
        raise ValidationError(f"Row number must be >= {FIRST_DATA_ROW} (row 1 is the header)")
    return row
