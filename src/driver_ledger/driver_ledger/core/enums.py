from __future__ import annotations

from enum import Enum


class SchemaVersion(str, Enum):
    """Physical column layout of a monthly segment."""

    OLD = "OLD"
    NEW = "NEW"
    UNKNOWN = "UNKNOWN"


class LedgerField(str, Enum):
    """Logical attendance fields, in NEW-layout order."""

    DRIVER_NAME = "driverName"
    DATE = "date"
    DAY_OF_WEEK = "dayOfWeek"
    CLOCK_IN = "clockIn"
    CLOCK_OUT = "clockOut"
    OT_START = "otStart"
    OT_END = "otEnd"
    COMMENTS = "comments"
    SUBMITTED_AT = "submittedAt"
    OT_HOURS = "otHours"
    APPROVAL = "approval"


class ApprovalStatus(str, Enum):
    """Values stored in the approval column. Empty means pending."""

    PENDING = ""
    APPROVE = "Approve"
    DENY = "Deny"
    AUTO = "AUTO"


class OvertimeStatus(str, Enum):
    COMPUTED = "COMPUTED"
    WITHIN_STANDARD_HOURS = "WITHIN_STANDARD_HOURS"
    BLACKOUT = "BLACKOUT"


class ClockEventType(str, Enum):
    CLOCK_IN = "clockIn"
    CLOCK_OUT = "clockOut"


class NameMatchPolicy(str, Enum):
    """How driver names are compared when scanning a segment."""

    EXACT = "exact"
    CASEFOLD = "casefold"

    def matches(self, stored: str, wanted: str) -> bool:
        if self is NameMatchPolicy.CASEFOLD:
            return (stored or "").strip().casefold() == (wanted or "").strip().casefold()
        return stored == wanted
