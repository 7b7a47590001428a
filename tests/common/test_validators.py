import pytest

from src.driver_ledger.driver_ledger.common.validators import optional_clock_time, require_data_row, require_non_empty
from src.driver_ledger.driver_ledger.core.exceptions import ValidationError


def test_require_non_empty_strips():
    assert require_non_empty("  Somchai ", "driverName") == "Somchai"
    with pytest.raises(ValidationError):
        require_non_empty("   ", "driverName")


def test_optional_clock_time():
    assert optional_clock_time(None, "clockIn") is None
    assert optional_clock_time("  ", "clockIn") is None
    assert optional_clock_time("7:05", "clockIn") == "07:05"
    with pytest.raises(ValidationError, match="clockOut"):
        optional_clock_time("later", "clockOut")


def test_require_data_row():
    assert require_data_row("2") == 2
    with pytest.raises(ValidationError):
        require_data_row(1)
    with pytest.raises(ValidationError):
        require_data_row("x")
