from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ..committees.model import Committee
from ..committees.repository import CommitteeRepository, MembershipRepository
from ..common.datetime_utils import isoformat
from ..common.validators import require_choice, require_id
from ..core.constants import MAX_ATTENDANCE_UPDATES
from ..core.enums import AttendanceStatus, MeetingStatus, Role
from ..core.exceptions import (
    AlreadyFinalizedError,
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..meetings.model import Meeting
from ..meetings.repository import MeetingRepository
from .model import Attendance, AttendanceMark, MemberAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkAttendance:
    """Validated body of POST /attendance/mark."""

    meeting_id: int
    status: AttendanceStatus

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MarkAttendance":
        if not payload.get("meetingId") or not payload.get("status"):
            raise ValidationError("Meeting ID and status are required")
        return cls(
            meeting_id=require_id(payload.get("meetingId"), "Meeting ID"),
            status=require_choice(payload.get("status"), AttendanceStatus, "Invalid attendance status"),
        )


@dataclass(frozen=True)
class AttendanceDetail:
    attendance: Attendance
    meeting: Meeting
    committee: Committee

    def to_dict(self) -> dict:
        data = self.attendance.to_dict()
        meeting = self.meeting.to_dict()
        meeting["committee"] = {"id": self.committee.committee_id, "name": self.committee.name}
        data["meeting"] = meeting
        return data


@dataclass(frozen=True)
class MeetingRoster:
    meeting: Meeting
    committee: Committee
    entries: Sequence[MemberAttendance]

    def to_dict(self) -> dict:
        return {
            "meeting": {
                "id": self.meeting.meeting_id,
                "date": isoformat(self.meeting.date),
                "status": self.meeting.status.value,
                "committee": {"id": self.committee.committee_id, "name": self.committee.name},
            },
            "memberAttendance": [e.to_dict() for e in self.entries],
        }


class AttendanceService:
    """Attendance state machine.

    - A record may only be created while its meeting is ONGOING.
    - A record may be edited once; the edit is not gated on meeting status.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        meetings: MeetingRepository,
        committees: CommitteeRepository,
        memberships: MembershipRepository,
        *,
        max_updates: int = MAX_ATTENDANCE_UPDATES,
    ):
        self._attendance = attendance
        self._meetings = meetings
        self._committees = committees
        self._memberships = memberships
        self._max_updates = int(max_updates)

    def _get_meeting(self, meeting_id: int) -> Meeting:
        meeting = self._meetings.get_by_id(int(meeting_id))
        if not meeting:
            raise NotFoundError("Meeting not found")
        return meeting

    def _get_committee(self, committee_id: int) -> Committee:
        committee = self._committees.get_by_id(int(committee_id))
        if not committee:
            raise NotFoundError("Committee not found")
        return committee

    def _reload(self, meeting_id: int, user_id: int) -> Attendance:
        record = self._attendance.get_for_meeting_and_user(meeting_id=meeting_id, user_id=user_id)
        if not record:
            raise NotFoundError("Attendance not found")
        return record

    def record_attendance(self, *, meeting_id: int, user_id: int, status: Any) -> AttendanceMark:
        status = require_choice(status, AttendanceStatus, "Invalid attendance status")
        meeting = self._get_meeting(meeting_id)

        if not self._memberships.is_active_member(committee_id=meeting.committee_id, user_id=int(user_id)):
            raise AuthorizationError("You are not a member of this committee")

        existing = self._attendance.get_for_meeting_and_user(meeting_id=meeting.meeting_id, user_id=int(user_id))

        if existing is None:
            if meeting.status != MeetingStatus.ONGOING:
                logger.warning(
                    "Rejected attendance for meeting %s in status %s (user=%s)",
                    meeting.meeting_id,
                    meeting.status.value,
                    user_id,
                )
                raise InvalidStateError("Cannot mark attendance for this meeting")

            self._attendance.create_attendance(meeting_id=meeting.meeting_id, user_id=int(user_id), status=status)
            logger.info("Attendance created: meeting=%s user=%s status=%s", meeting.meeting_id, user_id, status.value)
            return AttendanceMark(attendance=self._reload(meeting.meeting_id, int(user_id)), created=True)

        if existing.update_count >= self._max_updates:
            raise AlreadyFinalizedError("You have already updated your attendance once")

        applied = self._attendance.apply_update(
            attendance_id=existing.attendance_id,
            status=status,
            max_updates=self._max_updates,
        )
        if not applied:
            # Lost the compare-and-set to a concurrent edit.
            raise AlreadyFinalizedError("You have already updated your attendance once")

        logger.info(
            "Attendance finalized: meeting=%s user=%s %s -> %s",
            meeting.meeting_id,
            user_id,
            existing.status.value,
            status.value,
        )
        return AttendanceMark(attendance=self._reload(meeting.meeting_id, int(user_id)), created=False)

    def get_attendance(self, *, meeting_id: int, user_id: int) -> AttendanceDetail:
        record = self._attendance.get_for_meeting_and_user(meeting_id=int(meeting_id), user_id=int(user_id))
        if not record:
            raise NotFoundError("Attendance not found")

        meeting = self._get_meeting(record.meeting_id)
        return AttendanceDetail(
            attendance=record,
            meeting=meeting,
            committee=self._get_committee(meeting.committee_id),
        )

    def list_meeting_attendance(self, *, meeting_id: int, caller_id: int, caller_role: Role) -> MeetingRoster:
        meeting = self._get_meeting(meeting_id)

        if caller_role != Role.ADMIN and not self._memberships.is_active_member(
            committee_id=meeting.committee_id,
            user_id=int(caller_id),
        ):
            raise AuthorizationError("You are not authorized to view this data")

        by_user = {
            row.attendance.user_id: row.attendance
            for row in self._attendance.list_for_meeting(meeting_id=meeting.meeting_id)
        }
        members = self._memberships.list_active_members(committee_id=meeting.committee_id, order_by_name=True)

        return MeetingRoster(
            meeting=meeting,
            committee=self._get_committee(meeting.committee_id),
            entries=[MemberAttendance(user=m.user, attendance=by_user.get(m.user.user_id)) for m in members],
        )
