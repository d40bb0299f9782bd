from committee_attendance.core.enums import AttendanceStatus
from committee_attendance.reports.calculator.standard_calculator import StandardAttendanceRateCalculator
from committee_attendance.reports.model import StatusCounts


def test_present_and_legal_late_count_as_attended():
    counts = StatusCounts.from_statuses(
        [AttendanceStatus.PRESENT, AttendanceStatus.LEGAL_LATE, AttendanceStatus.LATE, AttendanceStatus.LEAVE]
    )

    calc = StandardAttendanceRateCalculator()
    assert calc.attended(counts) == 2
    assert calc.rate(counts, 4) == "50.00%"


def test_rate_formatting():
    calc = StandardAttendanceRateCalculator()

    assert calc.rate(StatusCounts(present=2), 3) == "66.67%"
    assert calc.rate(StatusCounts(present=1), 1) == "100.00%"
    assert calc.rate(StatusCounts(), 0) == "0%"


def test_counts_add_field_by_field():
    total = StatusCounts(present=1, absent=2) + StatusCounts(present=3, late=1)

    assert total == StatusCounts(present=4, late=1, absent=2)
    assert total.count(AttendanceStatus.PRESENT) == 4
    assert total.sum() == 7
