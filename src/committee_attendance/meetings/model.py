from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import MeetingStatus


@dataclass(frozen=True)
class Meeting:
    """Domain entity: one occurrence of a committee meeting."""

    meeting_id: int
    committee_id: int
    date: datetime
    status: MeetingStatus
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.meeting_id,
            "committeeId": self.committee_id,
            "date": isoformat(self.date),
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MeetingListing:
    """Read-model for paginated meeting lists."""

    meeting: Meeting
    committee_name: str
    attendance_count: int

    def to_dict(self) -> dict:
        data = self.meeting.to_dict()
        data["committee"] = {"id": self.meeting.committee_id, "name": self.committee_name}
        data["_count"] = {"attendances": self.attendance_count}
        return data
