from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..attendance.model import Attendance
from ..core.enums import AttendanceStatus
from ..meetings.model import Meeting
from .calculator.base import AttendanceRateCalculator
from .model import AttendanceStatistics, StatusCounts, TimelineEntry


def build_timeline(
    meetings: Sequence[Meeting],
    attendance_by_meeting: Mapping[int, Attendance],
) -> list[TimelineEntry]:
    """Pair each meeting with the member's status; unrecorded meetings count as ABSENT."""
    timeline = []
    for meeting in meetings:
        record: Optional[Attendance] = attendance_by_meeting.get(meeting.meeting_id)
        timeline.append(
            TimelineEntry(
                meeting_id=meeting.meeting_id,
                date=meeting.date,
                status=record.status if record else AttendanceStatus.ABSENT,
            )
        )
    return timeline


def summarize(timeline: Sequence[TimelineEntry], calculator: AttendanceRateCalculator) -> AttendanceStatistics:
    counts = StatusCounts.from_statuses(entry.status for entry in timeline)
    total = len(timeline)
    return AttendanceStatistics(counts=counts, total=total, attendance_rate=calculator.rate(counts, total))


def fold(statistics: Iterable[AttendanceStatistics], calculator: AttendanceRateCalculator) -> AttendanceStatistics:
    """Additive roll-up of several statistics blocks (no weighting)."""
    counts = StatusCounts()
    total = 0
    for item in statistics:
        counts = counts + item.counts
        total += item.total
    return AttendanceStatistics(counts=counts, total=total, attendance_rate=calculator.rate(counts, total))
