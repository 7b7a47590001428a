from __future__ import annotations

import logging
from datetime import time
from typing import Optional

from ...common.datetime_utils import LedgerDate, minutes_of_day, parse_clock_time
from ...core.constants import EVENING_OT_START, MORNING_OT_END, OT_BLACKOUT_FROM_DAY
from ...core.enums import OvertimeStatus
from ...core.exceptions import InvalidDateFormat
from ..model import OvertimeResult
from .base import OvertimeCalculator

logger = logging.getLogger("driver_ledger.overtime")


def _hhmm(t: time) -> str:
    return t.strftime("%H:%M")


class StandardOvertimeCalculator(OvertimeCalculator):
    """Standard rule: time before 08:00 plus time after 17:00.

    No OT at all from the 25th of any month. Reported boundaries are the whole
    shift when both windows apply. Times are compared on one synthetic day, so a
    clock-out past midnight simply earns no evening OT.
    """

    def __init__(
        self,
        *,
        morning_end: time = MORNING_OT_END,
        evening_start: time = EVENING_OT_START,
        blackout_from_day: int = OT_BLACKOUT_FROM_DAY,
    ):
        self._morning_end = _hhmm(morning_end)
        self._evening_start = _hhmm(evening_start)
        self._blackout_from_day = int(blackout_from_day)

    def is_allowed(self, date_text: str) -> bool:
        try:
            day = LedgerDate.parse(date_text).day
        except InvalidDateFormat:
            logger.warning("Invalid date %r, allowing OT calculation", date_text)
            return True
        return day < self._blackout_from_day

    def compute(self, clock_in: Optional[str], clock_out: Optional[str], date_text: str) -> OvertimeResult:
        if not self.is_allowed(date_text):
            logger.debug("OT disabled for %s: on or after day %d", date_text, self._blackout_from_day)
            return OvertimeResult(status=OvertimeStatus.BLACKOUT)

        cin = parse_clock_time(clock_in) if clock_in else None
        cout = parse_clock_time(clock_out) if clock_out else None

        morning = 0
        if cin and minutes_of_day(cin) < minutes_of_day(self._morning_end):
            morning = minutes_of_day(self._morning_end) - minutes_of_day(cin)
        evening = 0
        if cout and minutes_of_day(cout) > minutes_of_day(self._evening_start):
            evening = minutes_of_day(cout) - minutes_of_day(self._evening_start)

        if morning and evening:
            start, end = cin, cout
        elif morning:
            start, end = cin, self._morning_end
        elif evening:
            start, end = self._evening_start, cout
        else:
            logger.debug("No OT: %s-%s within standard hours", cin, cout)
            return OvertimeResult(status=OvertimeStatus.WITHIN_STANDARD_HOURS)

        result = OvertimeResult(
            status=OvertimeStatus.COMPUTED,
            start=start,
            end=end,
            morning_minutes=morning,
            evening_minutes=evening,
        )
        logger.debug("OT %s -> %s = %s h", result.start, result.end, result.hours_text)
        return result
