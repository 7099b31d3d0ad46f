"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ZONE_OFFSET = "+08:00"
DEFAULT_WORK_START = "09:00"
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_HISTORY_LIMIT = 30

BREAK_THRESHOLD_HOURS = 4
BREAK_DEDUCTION_HOURS = 1
DURATION_PRECISION = 4

MISSING_CHECKOUT_NOTE = "Auto-marked: missing checkout from {day}"
