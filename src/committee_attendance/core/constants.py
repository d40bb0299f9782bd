"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOKEN_TTL_DAYS = 7
JWT_ALGORITHM = "HS256"

MAX_ATTENDANCE_UPDATES = 1

DEFAULT_MEETING_PAGE_SIZE = 10
UPCOMING_MEETINGS_LIMIT = 10
RECENT_COMMITTEE_MEETINGS = 10

MIN_PASSWORD_LENGTH = 6
