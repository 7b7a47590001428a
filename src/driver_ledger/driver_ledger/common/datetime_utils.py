from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..core.constants import (
    BANGKOK_TZ,
    BUDDHIST_ERA_OFFSET,
    BUDDHIST_ERA_THRESHOLD,
    MONTH_NAMES,
    SEGMENT_SUFFIX,
)
from ..core.exceptions import InvalidDateFormat, ValidationError

logger = logging.getLogger("driver_ledger.common.datetime_utils")

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
UNKNOWN_DAY = "Unknown"

DAY_TRANSLATIONS = {
    "en": {name: name for name in WEEKDAY_NAMES},
    "th": {
        "Monday": "วันจันทร์",
        "Tuesday": "วันอังคาร",
        "Wednesday": "วันพุธ",
        "Thursday": "วันพฤหัสบดี",
        "Friday": "วันศุกร์",
        "Saturday": "วันเสาร์",
        "Sunday": "วันอาทิตย์",
    },
}

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_AMPM = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)


def now_local() -> datetime:
    """Current Bangkok time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(BANGKOK_TZ)


def format_submitted_at(moment: datetime) -> str:
    """Render a submission timestamp with its explicit +07:00 offset."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=BANGKOK_TZ)
    return moment.astimezone(BANGKOK_TZ).isoformat(timespec="seconds")


def submitted_at_now(clock: Optional[Callable[[], datetime]] = None) -> str:
    return format_submitted_at((clock or now_local)())


def normalize_year(year: int) -> int:
    """Buddhist-era years (>= 2400) are shifted to the Gregorian epoch."""
    return year - BUDDHIST_ERA_OFFSET if year >= BUDDHIST_ERA_THRESHOLD else year


@dataclass(frozen=True)
class LedgerDate:
    """A day/month/year date as typed by drivers, e.g. ``1/8/2568``.

    ``year`` is always Gregorian. ``text`` is the spelling as typed; the
    ledger stores and matches on it.
    """

    day: int
    month: int
    year: int
    text: str

    @classmethod
    def parse(cls, value: str) -> "LedgerDate":
        text = (value or "").strip()
        parts = text.split("/")
        if len(parts) != 3:
            raise InvalidDateFormat(f"Date must be day/month/year: {value!r}")
        try:
            day, month, year = (int(p) for p in parts)
        except ValueError as e:
            raise InvalidDateFormat(f"Date must be day/month/year: {value!r}") from e
        year = normalize_year(year)
        try:
            date(year, month, day)
        except ValueError as e:
            raise InvalidDateFormat(f"Date out of range: {value!r}") from e
        return cls(day=day, month=month, year=year, text=text)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def segment_name(self) -> str:
        return segment_name_for(self.month, self.year)


def segment_name_for(month: int, year: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {normalize_year(year)} {SEGMENT_SUFFIX}"


def segment_name_from_text(date_text: str, *, today: Optional[date] = None) -> str:
    """Segment for a ledger date; an unparseable date lands in the current month."""
    try:
        return LedgerDate.parse(date_text).segment_name()
    except InvalidDateFormat:
        today = today or now_local().date()
        logger.warning("Invalid date %r, using current month segment", date_text)
        return segment_name_for(today.month, today.year)


def parse_segment_name(name: str) -> Optional[tuple[int, int]]:
    """``"August 2025 Attendance"`` -> ``(2025, 8)``; None for other sheets."""
    parts = (name or "").split()
    if len(parts) != 3 or parts[2] != SEGMENT_SUFFIX or parts[0] not in MONTH_NAMES:
        return None
    try:
        year = int(parts[1])
    except ValueError:
        return None
    return year, MONTH_NAMES.index(parts[0]) + 1


def day_of_week(date_text: str, *, fallback_to_today: bool = True, today: Optional[date] = None) -> str:
    """English weekday for a ledger date.

    An invalid date falls back to today's weekday when writing a new row, and
    to ``"Unknown"`` when decoding a stored row, where today means nothing.
    """
    try:
        return WEEKDAY_NAMES[LedgerDate.parse(date_text).to_date().weekday()]
    except InvalidDateFormat:
        if not fallback_to_today:
            return UNKNOWN_DAY
        logger.warning("Invalid date %r, using current date for day of week", date_text)
        return WEEKDAY_NAMES[(today or now_local().date()).weekday()]


def translate_day_of_week(name: str, language: str) -> str:
    return DAY_TRANSLATIONS.get(language, {}).get(name, name)


def localized_day_of_week(date_text: str, language: str, *, fallback_to_today: bool = True) -> str:
    return translate_day_of_week(day_of_week(date_text, fallback_to_today=fallback_to_today), language)


def parse_clock_time(value) -> str:
    """Normalize a clock value to ``HH:MM`` (24h).

    Accepts ``H:MM``/``HH:MM[:SS]``, ``h:MM AM/PM`` and spreadsheet day
    fractions (``0.75`` -> ``18:00``).
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        total_minutes = round(float(value) * 24 * 60)
        hours, minutes = divmod(total_minutes, 60)
        if not 0 <= hours < 24:
            raise ValidationError(f"Invalid clock time (HH:MM): {value!r}")
        return f"{hours:02d}:{minutes:02d}"

    text = str(value or "").strip()
    m = _HHMM.match(text)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
    else:
        m = _AMPM.match(text)
        if not m:
            raise ValidationError(f"Invalid clock time (HH:MM): {value!r}")
        hours, minutes = int(m.group(1)), int(m.group(2))
        period = m.group(3).upper()
        if not 1 <= hours <= 12:
            raise ValidationError(f"Invalid clock time (HH:MM): {value!r}")
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0

    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid clock time (HH:MM): {value!r}")
    return f"{hours:02d}:{minutes:02d}"


def minutes_of_day(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)
