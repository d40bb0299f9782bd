from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import MeetingStatus
from .model import Meeting, MeetingListing


class MeetingRepository(Protocol):
    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        raise NotImplementedError

    def list_for_committee(
        self,
        *,
        committee_id: int,
        status: Optional[MeetingStatus] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[MeetingListing]:
        """Newest first."""

        raise NotImplementedError

    def count_for_committee(self, *, committee_id: int, status: Optional[MeetingStatus] = None) -> int:
        raise NotImplementedError

    def list_upcoming(
        self,
        *,
        committee_ids: Collection[int],
        since: datetime,
        statuses: Collection[MeetingStatus],
        limit: int,
    ) -> Sequence[MeetingListing]:
        """Meetings dated at or after `since`, oldest first."""

        raise NotImplementedError

    def list_in_range(
        self,
        *,
        committee_ids: Collection[int],
        start_date: date,
        end_date: date,
        statuses: Collection[MeetingStatus],
    ) -> Sequence[Meeting]:
        """Meetings whose calendar day lies in [start_date, end_date], oldest first."""

        raise NotImplementedError

    def create_meeting(self, *, committee_id: int, meeting_date: datetime, notes: Optional[str]) -> int:
        """Insert with status SCHEDULED."""

        raise NotImplementedError

    def update_status(self, *, meeting_id: int, status: MeetingStatus) -> bool:
        raise NotImplementedError
