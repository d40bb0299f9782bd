from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from ..committees.model import Committee
from ..common.datetime_utils import isoformat
from ..core.enums import AttendanceStatus
from ..users.model import UserSummary

# Every attendance status must map to a StatusCounts field.
STATUS_FIELDS = {
    AttendanceStatus.PRESENT: "present",
    AttendanceStatus.LEGAL_LATE: "legal_late",
    AttendanceStatus.LATE: "late",
    AttendanceStatus.LEAVE: "leave",
    AttendanceStatus.ABSENT: "absent",
}

_unmapped = set(AttendanceStatus) - set(STATUS_FIELDS)
if _unmapped:
    raise RuntimeError(f"Attendance statuses without a report counter: {sorted(s.value for s in _unmapped)}")


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    legal_late: int = 0
    late: int = 0
    leave: int = 0
    absent: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[AttendanceStatus]) -> "StatusCounts":
        tally = Counter(statuses)
        return cls(**{STATUS_FIELDS[s]: tally.get(s, 0) for s in AttendanceStatus})

    def __add__(self, other: "StatusCounts") -> "StatusCounts":
        return StatusCounts(**{name: getattr(self, name) + getattr(other, name) for name in STATUS_FIELDS.values()})

    def count(self, status: AttendanceStatus) -> int:
        return getattr(self, STATUS_FIELDS[status])

    def sum(self) -> int:
        return sum(getattr(self, name) for name in STATUS_FIELDS.values())


@dataclass(frozen=True)
class AttendanceStatistics:
    counts: StatusCounts
    total: int
    attendance_rate: str

    def to_dict(self) -> dict:
        return {
            "present": self.counts.present,
            "legalLate": self.counts.legal_late,
            "late": self.counts.late,
            "leave": self.counts.leave,
            "absent": self.counts.absent,
            "total": self.total,
            "attendanceRate": self.attendance_rate,
        }


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class TimelineEntry:
    """One in-scope meeting and the status observed for a member (ABSENT if unrecorded)."""

    meeting_id: int
    date: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {"meetingId": self.meeting_id, "date": isoformat(self.date), "status": self.status.value}


@dataclass(frozen=True)
class MemberStatistics:
    user: UserSummary
    attendances: Sequence[TimelineEntry]
    statistics: AttendanceStatistics

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "attendances": [a.to_dict() for a in self.attendances],
            "statistics": self.statistics.to_dict(),
        }


@dataclass(frozen=True)
class CommitteeReport:
    committee: Committee
    date_range: DateRange
    total_meetings: int
    members: Sequence[MemberStatistics] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "committee": self.committee.summary_dict(),
            "dateRange": self.date_range.to_dict(),
            "totalMeetings": self.total_meetings,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass(frozen=True)
class CommitteeAttendance:
    """A member's timeline and statistics within one committee."""

    committee: Committee
    meetings: Sequence[TimelineEntry]
    statistics: AttendanceStatistics

    def to_dict(self) -> dict:
        return {
            "committee": self.committee.to_dict(),
            "meetings": [m.to_dict() for m in self.meetings],
            "statistics": self.statistics.to_dict(),
        }


@dataclass(frozen=True)
class MemberReport:
    user: UserSummary
    date_range: DateRange
    committees: Sequence[CommitteeAttendance]
    overall: AttendanceStatistics

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "dateRange": self.date_range.to_dict(),
            "committees": [c.to_dict() for c in self.committees],
            "overallStatistics": self.overall.to_dict(),
        }
