from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import MAX_ATTENDANCE_UPDATES
from ..core.enums import AttendanceStatus
from ..users.model import UserSummary


@dataclass(frozen=True)
class Attendance:
    """Domain entity: a member's status for one meeting.

    At most one row per (meeting_id, user_id). `update_count` starts at 0 and
    the row becomes immutable once it reaches MAX_ATTENDANCE_UPDATES.
    """

    attendance_id: int
    meeting_id: int
    user_id: int
    status: AttendanceStatus
    update_count: int = 0

    @property
    def is_finalized(self) -> bool:
        return self.update_count >= MAX_ATTENDANCE_UPDATES

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "meetingId": self.meeting_id,
            "userId": self.user_id,
            "status": self.status.value,
            "updateCount": self.update_count,
        }


@dataclass(frozen=True)
class AttendanceMark:
    """Outcome of recording attendance: the stored row and whether it was new."""

    attendance: Attendance
    created: bool

    @property
    def message(self) -> str:
        return "Attendance marked successfully" if self.created else "Attendance updated successfully"


@dataclass(frozen=True)
class AttendanceWithUser:
    attendance: Attendance
    user: UserSummary

    def to_dict(self) -> dict:
        data = self.attendance.to_dict()
        data["user"] = self.user.to_dict()
        return data


@dataclass(frozen=True)
class MemberAttendance:
    """Roster entry: every active member, with their row or None."""

    user: UserSummary
    attendance: Optional[Attendance]

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "attendance": self.attendance.to_dict() if self.attendance else None,
        }
