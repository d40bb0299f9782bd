from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..attendance.model import Attendance, AttendanceWithUser
from ..attendance.repository import AttendanceRepository
from ..committees.model import Committee
from ..committees.repository import CommitteeRepository, MembershipRepository
from ..common.datetime_utils import isoformat, now_utc, parse_iso_datetime
from ..common.validators import optional_text, require_choice, require_id
from ..core.constants import DEFAULT_MEETING_PAGE_SIZE, UPCOMING_MEETINGS_LIMIT
from ..core.enums import UPCOMING_MEETING_STATUSES, MeetingStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import Principal
from .model import Meeting, MeetingListing
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewMeeting:
    committee_id: int
    date: datetime
    notes: Optional[str]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NewMeeting":
        if not payload.get("committeeId") or not payload.get("date"):
            raise ValidationError("Committee ID and date are required")
        return cls(
            committee_id=require_id(payload.get("committeeId"), "Committee ID"),
            date=parse_iso_datetime(payload.get("date"), "date"),
            notes=optional_text(payload.get("notes")),
        )


@dataclass(frozen=True)
class MeetingPage:
    meetings: Sequence[MeetingListing]
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict:
        return {
            "meetings": [m.to_dict() for m in self.meetings],
            "pagination": {"total": self.total, "limit": self.limit, "offset": self.offset},
        }


@dataclass(frozen=True)
class UpcomingMeeting:
    listing: MeetingListing
    attendance: Optional[Attendance]

    def to_dict(self) -> dict:
        data = self.listing.to_dict()
        data["attendances"] = (
            [
                {
                    "id": self.attendance.attendance_id,
                    "status": self.attendance.status.value,
                    "updateCount": self.attendance.update_count,
                }
            ]
            if self.attendance
            else []
        )
        return data


@dataclass(frozen=True)
class MeetingDetail:
    """Meeting view; `attendances` is None for the limited (non-member) view."""

    meeting: Meeting
    committee: Committee
    attendances: Optional[Sequence[AttendanceWithUser]]

    def to_dict(self) -> dict:
        if self.attendances is None:
            return {
                "id": self.meeting.meeting_id,
                "date": isoformat(self.meeting.date),
                "status": self.meeting.status.value,
                "committee": {"id": self.committee.committee_id, "name": self.committee.name},
            }
        data = self.meeting.to_dict()
        data["committee"] = self.committee.to_dict()
        data["attendances"] = [a.to_dict() for a in self.attendances]
        return data


def _parse_page_arg(value: Any, field_name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if parsed < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return parsed


class MeetingService:
    """Use cases: schedule meetings and drive their status."""

    def __init__(
        self,
        meetings: MeetingRepository,
        committees: CommitteeRepository,
        memberships: MembershipRepository,
        attendance: AttendanceRepository,
    ):
        self._meetings = meetings
        self._committees = committees
        self._memberships = memberships
        self._attendance = attendance

    def list_committee_meetings(
        self,
        *,
        committee_id: int,
        status: Optional[str] = None,
        limit: Any = None,
        offset: Any = None,
    ) -> MeetingPage:
        status_filter = (
            require_choice(status, MeetingStatus, "Invalid meeting status") if status else None
        )
        page_limit = _parse_page_arg(limit, "limit", DEFAULT_MEETING_PAGE_SIZE)
        page_offset = _parse_page_arg(offset, "offset", 0)

        meetings = self._meetings.list_for_committee(
            committee_id=int(committee_id),
            status=status_filter,
            limit=page_limit,
            offset=page_offset,
        )
        total = self._meetings.count_for_committee(committee_id=int(committee_id), status=status_filter)
        return MeetingPage(meetings=meetings, total=total, limit=page_limit, offset=page_offset)

    def list_upcoming_for_user(self, user_id: int, *, now: Optional[datetime] = None) -> Sequence[UpcomingMeeting]:
        now = now or now_utc()
        committees = self._memberships.list_active_committees_for_user(user_id=int(user_id))
        listings = self._meetings.list_upcoming(
            committee_ids=[c.committee_id for c in committees],
            since=now,
            statuses=UPCOMING_MEETING_STATUSES,
            limit=UPCOMING_MEETINGS_LIMIT,
        )
        own = {
            a.meeting_id: a
            for a in self._attendance.list_for_meetings(
                meeting_ids=[m.meeting.meeting_id for m in listings],
                user_id=int(user_id),
            )
        }
        return [UpcomingMeeting(listing=m, attendance=own.get(m.meeting.meeting_id)) for m in listings]

    def create_meeting(self, *, current_role: Role, data: NewMeeting) -> Meeting:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")

        if not self._committees.get_by_id(data.committee_id):
            raise NotFoundError("Committee not found")

        meeting_id = self._meetings.create_meeting(
            committee_id=data.committee_id,
            meeting_date=data.date,
            notes=data.notes,
        )
        logger.info("Scheduled meeting %s for committee %s on %s", meeting_id, data.committee_id, data.date)
        return Meeting(
            meeting_id=meeting_id,
            committee_id=data.committee_id,
            date=data.date,
            status=MeetingStatus.SCHEDULED,
            notes=data.notes,
        )

    def update_meeting_status(self, *, current_role: Role, meeting_id: int, status: Any) -> Meeting:
        """Set any of the four statuses; no predecessor state is enforced."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")

        if not status:
            raise ValidationError("Valid status is required")
        new_status = require_choice(status, MeetingStatus, "Valid status is required")

        if not self._meetings.update_status(meeting_id=int(meeting_id), status=new_status):
            raise NotFoundError("Meeting not found")

        meeting = self._meetings.get_by_id(int(meeting_id))
        if not meeting:
            raise NotFoundError("Meeting not found")
        logger.info("Meeting %s status set to %s", meeting.meeting_id, new_status.value)
        return meeting

    def get_meeting(self, *, meeting_id: int, principal: Principal) -> MeetingDetail:
        meeting = self._meetings.get_by_id(int(meeting_id))
        if not meeting:
            raise NotFoundError("Meeting not found")

        committee = self._committees.get_by_id(meeting.committee_id)
        if not committee:
            raise NotFoundError("Committee not found")

        can_see_all = principal.is_admin or self._memberships.is_active_member(
            committee_id=meeting.committee_id,
            user_id=principal.user_id,
        )
        if not can_see_all:
            return MeetingDetail(meeting=meeting, committee=committee, attendances=None)

        return MeetingDetail(
            meeting=meeting,
            committee=committee,
            attendances=self._attendance.list_for_meeting(meeting_id=meeting.meeting_id),
        )
