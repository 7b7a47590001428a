from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ..core.enums import OvertimeStatus

TWO_PLACES = Decimal("0.01")


def minutes_to_hours(minutes: int) -> Decimal:
    return (Decimal(int(minutes)) / Decimal(60)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OvertimeResult:
    """OT window for one shift.

    ``hours`` is the rounded sum of the exact morning and evening spans, so a
    disabled result (blackout or nothing outside 08:00-17:00) always carries
    ``0.00`` and empty boundaries.
    """

    status: OvertimeStatus
    start: str = ""
    end: str = ""
    morning_minutes: int = 0
    evening_minutes: int = 0

    @property
    def disabled(self) -> bool:
        return self.status is not OvertimeStatus.COMPUTED

    @property
    def morning_hours(self) -> Decimal:
        return minutes_to_hours(self.morning_minutes)

    @property
    def evening_hours(self) -> Decimal:
        return minutes_to_hours(self.evening_minutes)

    @property
    def hours(self) -> Decimal:
        return minutes_to_hours(self.morning_minutes + self.evening_minutes)

    @property
    def hours_text(self) -> str:
        """Value written to the OT hours column ("" when disabled)."""
        return "" if self.disabled else f"{self.hours:.2f}"

    @property
    def reason(self) -> str:
        return {
            OvertimeStatus.COMPUTED: "OT calculation completed",
            OvertimeStatus.WITHIN_STANDARD_HOURS: "within standard hours",
            OvertimeStatus.BLACKOUT: "OT calculation disabled due to end-of-month rule",
        }[self.status]

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "otStart": self.start,
            "otEnd": self.end,
            "otHours": f"{self.hours:.2f}",
            "morningOTHours": f"{self.morning_hours:.2f}",
            "eveningOTHours": f"{self.evening_hours:.2f}",
            "businessRule": "disabled" if self.status is OvertimeStatus.BLACKOUT else "enabled",
            "reason": self.reason,
        }
