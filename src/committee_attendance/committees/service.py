from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import optional_text, require_id, require_non_empty
from ..core.constants import RECENT_COMMITTEE_MEETINGS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..meetings.model import MeetingListing
from ..meetings.repository import MeetingRepository
from ..users.repository import UserRepository
from .model import ActiveMember, Committee, CommitteeListing, CommitteeMember
from .repository import CommitteeRepository, MembershipRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewCommittee:
    name: str
    description: Optional[str]
    meeting_day: str
    meeting_time: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NewCommittee":
        try:
            return cls(
                name=require_non_empty(payload.get("name"), "Name"),
                description=optional_text(payload.get("description")),
                meeting_day=require_non_empty(payload.get("meetingDay"), "Meeting day"),
                meeting_time=require_non_empty(payload.get("meetingTime"), "Meeting time"),
            )
        except ValidationError:
            raise ValidationError("Name, meeting day, and meeting time are required")


@dataclass(frozen=True)
class MembershipChange:
    member: CommitteeMember
    created: bool

    @property
    def message(self) -> str:
        return "Member added successfully" if self.created else "Membership reactivated successfully"


@dataclass(frozen=True)
class CommitteeDetail:
    committee: Committee
    members: Sequence[ActiveMember]
    recent_meetings: Sequence[MeetingListing]

    def to_dict(self) -> dict:
        data = self.committee.to_dict()
        data["members"] = [
            {**m.member.to_dict(), "user": m.user.to_dict()} for m in self.members
        ]
        data["meetings"] = [m.meeting.to_dict() for m in self.recent_meetings]
        return data


class MembershipService:
    """Membership resolver: who is an active member of which committee.

    Rows are only ever flipped between active and inactive so that history
    survives for reports.
    """

    def __init__(self, memberships: MembershipRepository, committees: CommitteeRepository, users: UserRepository):
        self._memberships = memberships
        self._committees = committees
        self._users = users

    def is_active_member(self, committee_id: int, user_id: int) -> bool:
        return self._memberships.is_active_member(committee_id=int(committee_id), user_id=int(user_id))

    def add_member(self, *, current_role: Role, committee_id: int, user_id: Any) -> MembershipChange:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")

        user_id = require_id(user_id, "User ID")
        if not self._committees.get_by_id(committee_id):
            raise NotFoundError("Committee not found")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")

        existing = self._memberships.get_membership(committee_id=committee_id, user_id=user_id)
        if existing:
            if existing.is_active:
                raise ConflictError("User is already a member of this committee")
            if not self._memberships.reactivate(member_id=existing.member_id):
                # Another request reactivated the row between our read and write.
                raise ConflictError("User is already a member of this committee")
            logger.info("Reactivated membership %s (committee=%s user=%s)", existing.member_id, committee_id, user_id)
            return MembershipChange(
                member=CommitteeMember(
                    member_id=existing.member_id,
                    user_id=existing.user_id,
                    committee_id=existing.committee_id,
                    is_active=True,
                ),
                created=False,
            )

        member_id = self._memberships.create_membership(committee_id=committee_id, user_id=user_id)
        logger.info("Added membership %s (committee=%s user=%s)", member_id, committee_id, user_id)
        return MembershipChange(
            member=CommitteeMember(member_id=member_id, user_id=user_id, committee_id=committee_id, is_active=True),
            created=True,
        )

    def remove_member(self, *, current_role: Role, committee_id: int, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")

        if not self._memberships.deactivate(committee_id=int(committee_id), user_id=int(user_id)):
            raise NotFoundError("Member not found in committee")
        logger.info("Removed user %s from committee %s", user_id, committee_id)


class CommitteeService:
    """Use cases: browse and create committees."""

    def __init__(self, committees: CommitteeRepository, memberships: MembershipRepository, meetings: MeetingRepository):
        self._committees = committees
        self._memberships = memberships
        self._meetings = meetings

    def list_committees(self) -> Sequence[CommitteeListing]:
        return self._committees.list_active()

    def list_my_committees(self, user_id: int) -> Sequence[CommitteeListing]:
        return self._committees.list_for_member(int(user_id))

    def get_committee(self, committee_id: int) -> CommitteeDetail:
        committee = self._committees.get_by_id(int(committee_id))
        if not committee:
            raise NotFoundError("Committee not found")

        return CommitteeDetail(
            committee=committee,
            members=self._memberships.list_active_members(committee_id=committee.committee_id),
            recent_meetings=self._meetings.list_for_committee(
                committee_id=committee.committee_id,
                limit=RECENT_COMMITTEE_MEETINGS,
            ),
        )

    def create_committee(self, *, current_role: Role, data: NewCommittee) -> Committee:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")

        committee_id = self._committees.create_committee(
            name=data.name,
            description=data.description,
            meeting_day=data.meeting_day,
            meeting_time=data.meeting_time,
        )
        logger.info("Created committee %s (%s)", committee_id, data.name)
        return Committee(
            committee_id=committee_id,
            name=data.name,
            description=data.description,
            meeting_day=data.meeting_day,
            meeting_time=data.meeting_time,
            is_active=True,
        )
