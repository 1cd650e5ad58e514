"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TREND_DAYS = 7
MAX_TREND_DAYS = 3650
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

DEFAULT_FN_START = "09:00"
DEFAULT_FN_END = "09:30"
DEFAULT_AN_START = "14:00"
DEFAULT_AN_END = "14:30"

NO_BRIGADE = "No Brigade"
ATTENDANCE_MARKED_EVENT = "attendance-marked"
