from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..users.model import UserSummary


@dataclass(frozen=True)
class Committee:
    """Domain entity: a committee with a recurring meeting slot."""

    committee_id: int
    name: str
    description: Optional[str]
    meeting_day: str
    meeting_time: str
    is_active: bool = True

    def summary_dict(self) -> dict:
        return {"id": self.committee_id, "name": self.name, "description": self.description}

    def to_dict(self) -> dict:
        return {
            "id": self.committee_id,
            "name": self.name,
            "description": self.description,
            "meetingDay": self.meeting_day,
            "meetingTime": self.meeting_time,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class CommitteeListing:
    """Read-model for committee lists (with aggregate counts)."""

    committee: Committee
    member_count: int
    meeting_count: int

    def to_dict(self) -> dict:
        data = self.committee.to_dict()
        data["_count"] = {"members": self.member_count, "meetings": self.meeting_count}
        return data


@dataclass(frozen=True)
class CommitteeMember:
    """Join row between a user and a committee.

    Rows are never deleted: removal flips `is_active`, re-adding flips it back.
    """

    member_id: int
    user_id: int
    committee_id: int
    is_active: bool

    def to_dict(self) -> dict:
        return {
            "id": self.member_id,
            "userId": self.user_id,
            "committeeId": self.committee_id,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class ActiveMember:
    """An active membership joined with the member's user summary."""

    member: CommitteeMember
    user: UserSummary
