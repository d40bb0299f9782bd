from __future__ import annotations

from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import Attendance, AttendanceWithUser


class AttendanceRepository(Protocol):
    def get_for_meeting_and_user(self, *, meeting_id: int, user_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def create_attendance(self, *, meeting_id: int, user_id: int, status: AttendanceStatus) -> int:
        """Insert with update_count=0; raises ConflictError if the pair exists."""

        raise NotImplementedError

    def apply_update(self, *, attendance_id: int, status: AttendanceStatus, max_updates: int) -> bool:
        """Compare-and-set: write only while update_count < max_updates.

        Returns False when the edit budget was already spent, so two
        concurrent edits can never both succeed.
        """

        raise NotImplementedError

    def list_for_meeting(self, *, meeting_id: int) -> Sequence[AttendanceWithUser]:
        """All rows of a meeting with user summaries, ordered by user name."""

        raise NotImplementedError

    def list_for_meetings(
        self,
        *,
        meeting_ids: Collection[int],
        user_id: Optional[int] = None,
    ) -> Sequence[Attendance]:
        raise NotImplementedError
