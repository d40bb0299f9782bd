from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ActiveMember, Committee, CommitteeListing, CommitteeMember


class CommitteeRepository(Protocol):
    def get_by_id(self, committee_id: int) -> Optional[Committee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[CommitteeListing]:
        raise NotImplementedError

    def list_for_member(self, user_id: int) -> Sequence[CommitteeListing]:
        """Committees where the user holds an active membership."""

        raise NotImplementedError

    def create_committee(
        self,
        *,
        name: str,
        description: Optional[str],
        meeting_day: str,
        meeting_time: str,
    ) -> int:
        raise NotImplementedError


class MembershipRepository(Protocol):
    """Access to committee_members rows, unique per (user_id, committee_id)."""

    def get_membership(self, *, committee_id: int, user_id: int) -> Optional[CommitteeMember]:
        """Return the row for the pair whatever its active flag."""

        raise NotImplementedError

    def is_active_member(self, *, committee_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def create_membership(self, *, committee_id: int, user_id: int) -> int:
        """Insert an active row; raises ConflictError if the pair exists."""

        raise NotImplementedError

    def reactivate(self, *, member_id: int) -> bool:
        """Set is_active only if currently inactive. False means another writer won."""

        raise NotImplementedError

    def deactivate(self, *, committee_id: int, user_id: int) -> bool:
        """Clear is_active on the active row. False means no active row."""

        raise NotImplementedError

    def list_active_members(self, *, committee_id: int, order_by_name: bool = False) -> Sequence[ActiveMember]:
        raise NotImplementedError

    def list_active_committees_for_user(
        self,
        *,
        user_id: int,
        committee_id: Optional[int] = None,
    ) -> Sequence[Committee]:
        raise NotImplementedError
