from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class MeetingStatus(str, Enum):
    """Lifecycle of a committee meeting. Transitions are set by admins."""

    SCHEDULED = "SCHEDULED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AttendanceStatus(str, Enum):
    """Qualifying status a member records for a meeting."""

    PRESENT = "PRESENT"
    LEGAL_LATE = "LEGAL_LATE"
    LATE = "LATE"
    LEAVE = "LEAVE"
    ABSENT = "ABSENT"


# Meetings that count towards attendance statistics.
REPORTABLE_MEETING_STATUSES = frozenset({MeetingStatus.COMPLETED, MeetingStatus.ONGOING})

# Meetings shown in a member's upcoming list.
UPCOMING_MEETING_STATUSES = frozenset({MeetingStatus.SCHEDULED, MeetingStatus.ONGOING})
