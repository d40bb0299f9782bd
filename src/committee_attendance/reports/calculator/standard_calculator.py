from __future__ import annotations

from .base import AttendanceRateCalculator
from ..model import StatusCounts


class StandardAttendanceRateCalculator(AttendanceRateCalculator):
    """Standard rule: PRESENT and LEGAL_LATE count as attended."""

    def attended(self, counts: StatusCounts) -> int:
        return counts.present + counts.legal_late
