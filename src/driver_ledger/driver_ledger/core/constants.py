"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time, timedelta, timezone

MORNING_OT_END = time(8, 0)
EVENING_OT_START = time(17, 0)
OT_BLACKOUT_FROM_DAY = 25

BUDDHIST_ERA_OFFSET = 543
BUDDHIST_ERA_THRESHOLD = 2400

BANGKOK_TZ = timezone(timedelta(hours=7), name="Asia/Bangkok")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
SEGMENT_SUFFIX = "Attendance"

HEADER_ROW = 1
FIRST_DATA_ROW = 2

DEFAULT_LANGUAGE = "en"
DEFAULT_DEDUP_TTL_SECONDS = 30
DEFAULT_DEDUP_MAX_ENTRIES = 1024
DEDUP_KEY_MESSAGE_CHARS = 100
