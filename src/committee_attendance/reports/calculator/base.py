from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import StatusCounts


class AttendanceRateCalculator(ABC):
    """Calculator interface (Strategy Pattern for the attendance rate)."""

    @abstractmethod
    def attended(self, counts: StatusCounts) -> int:
        """How many of the counted meetings qualify as attended."""

        raise NotImplementedError

    def rate(self, counts: StatusCounts, total: int) -> str:
        if total <= 0:
            return "0%"
        return f"{self.attended(counts) / total * 100:.2f}%"
