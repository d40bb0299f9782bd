from __future__ import annotations

from datetime import datetime

import pytest

from committee_attendance.core.enums import AttendanceStatus, MeetingStatus, Role
from committee_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from committee_attendance.reports.service import resolve_date_range


@pytest.fixture
def finance(store):
    committee = store.add_committee("Finance")
    alice = store.add_user("Alice")
    store.add_member(committee, alice)
    return committee, alice


def _committee_report(container, committee, caller, **overrides):
    kwargs = dict(
        committee_id=committee.committee_id,
        start_date="2025-01-01",
        end_date="2025-01-31",
        caller_id=caller.user_id,
        caller_role=caller.role,
    )
    kwargs.update(overrides)
    return container.report_service.committee_report(**kwargs)


def test_rate_counts_present_and_legal_late(container, store, finance):
    committee, alice = finance
    m1 = store.add_meeting(committee, datetime(2025, 1, 6, 18, 0))
    m2 = store.add_meeting(committee, datetime(2025, 1, 13, 18, 0))
    store.add_meeting(committee, datetime(2025, 1, 20, 18, 0), MeetingStatus.ONGOING)
    store.add_attendance(m1, alice, AttendanceStatus.PRESENT)
    store.add_attendance(m2, alice, AttendanceStatus.LEGAL_LATE)

    report = _committee_report(container, committee, alice)

    assert report.total_meetings == 3
    (member,) = report.members
    stats = member.statistics.to_dict()
    assert stats == {
        "present": 1,
        "legalLate": 1,
        "late": 0,
        "leave": 0,
        "absent": 1,
        "total": 3,
        "attendanceRate": "66.67%",
    }
    assert [a.status for a in member.attendances][-1] == AttendanceStatus.ABSENT


def test_scheduled_cancelled_and_out_of_range_meetings_are_ignored(container, store, finance):
    committee, alice = finance
    counted = store.add_meeting(committee, datetime(2025, 1, 31, 23, 30))
    store.add_meeting(committee, datetime(2025, 1, 10, 18, 0), MeetingStatus.SCHEDULED)
    store.add_meeting(committee, datetime(2025, 1, 11, 18, 0), MeetingStatus.CANCELLED)
    store.add_meeting(committee, datetime(2025, 2, 1, 0, 0))
    store.add_meeting(committee, datetime(2024, 12, 31, 23, 59))
    store.add_attendance(counted, alice, AttendanceStatus.LATE)

    report = _committee_report(container, committee, alice)

    assert report.total_meetings == 1
    stats = report.members[0].statistics
    assert stats.counts.late == 1
    assert stats.attendance_rate == "0.00%"


def test_no_meetings_gives_zero_rate(container, finance):
    committee, alice = finance

    report = _committee_report(container, committee, alice)

    assert report.total_meetings == 0
    stats = report.members[0].statistics
    assert stats.total == 0
    assert stats.attendance_rate == "0%"


def test_counts_always_sum_to_total(container, store, finance):
    committee, alice = finance
    statuses = list(AttendanceStatus)
    for day, status in enumerate(statuses, start=1):
        meeting = store.add_meeting(committee, datetime(2025, 1, day, 18, 0))
        store.add_attendance(meeting, alice, status)
    store.add_meeting(committee, datetime(2025, 1, 20, 18, 0))

    stats = _committee_report(container, committee, alice).members[0].statistics

    assert stats.total == len(statuses) + 1
    assert stats.counts.sum() == stats.total
    assert stats.counts.absent == 2


def test_committee_report_includes_only_active_members(container, store, finance):
    committee, alice = finance
    bob = store.add_user("Bob")
    store.add_member(committee, bob, active=False)

    report = _committee_report(container, committee, alice).to_dict()

    assert [m["user"]["name"] for m in report["members"]] == ["Alice"]
    assert report["dateRange"] == {"start": "2025-01-01", "end": "2025-01-31"}
    assert report["committee"]["name"] == "Finance"


def test_committee_report_access(container, store, finance):
    committee, _ = finance
    outsider = store.add_user("Outsider")
    admin = store.add_user("Admin", role=Role.ADMIN)

    with pytest.raises(AuthorizationError, match="Access denied"):
        _committee_report(container, committee, outsider)
    with pytest.raises(NotFoundError):
        _committee_report(container, committee, admin, committee_id=404)

    assert _committee_report(container, committee, admin).total_meetings == 0


@pytest.mark.parametrize(
    "start, end",
    [(None, "2025-01-31"), ("2025-01-01", ""), ("2025-02-01", "2025-01-01"), ("yesterday", "2025-01-01")],
)
def test_date_range_validation(container, finance, start, end):
    committee, alice = finance

    with pytest.raises(ValidationError):
        _committee_report(container, committee, alice, start_date=start, end_date=end)


def test_member_report_folds_committees(container, store, finance):
    finance_committee, alice = finance
    events = store.add_committee("Events")
    store.add_member(events, alice)

    f1 = store.add_meeting(finance_committee, datetime(2025, 1, 6, 18, 0))
    store.add_meeting(finance_committee, datetime(2025, 1, 13, 18, 0))
    e1 = store.add_meeting(events, datetime(2025, 1, 8, 18, 0))
    e2 = store.add_meeting(events, datetime(2025, 1, 15, 18, 0))
    store.add_attendance(f1, alice, AttendanceStatus.PRESENT)
    store.add_attendance(e1, alice, AttendanceStatus.LEGAL_LATE)
    store.add_attendance(e2, alice, AttendanceStatus.LEAVE)

    report = container.report_service.member_report(
        user_id=alice.user_id,
        start_date="2025-01-01",
        end_date="2025-01-31",
        caller_id=alice.user_id,
        caller_role=Role.MEMBER,
    )

    assert [c.committee.name for c in report.committees] == ["Finance", "Events"]
    assert [c.statistics.attendance_rate for c in report.committees] == ["50.00%", "50.00%"]
    overall = report.to_dict()["overallStatistics"]
    assert overall["total"] == 4
    assert overall["present"] == 1
    assert overall["legalLate"] == 1
    assert overall["leave"] == 1
    assert overall["absent"] == 1
    assert overall["attendanceRate"] == "50.00%"


def test_member_report_committee_filter_and_access(container, store, finance):
    finance_committee, alice = finance
    events = store.add_committee("Events")
    store.add_member(events, alice)
    bob = store.add_user("Bob")
    admin = store.add_user("Admin", role=Role.ADMIN)

    filtered = container.report_service.member_report(
        user_id=alice.user_id,
        start_date="2025-01-01",
        end_date="2025-01-31",
        committee_id=str(events.committee_id),
        caller_id=admin.user_id,
        caller_role=Role.ADMIN,
    )
    assert [c.committee.name for c in filtered.committees] == ["Events"]
    assert filtered.overall.attendance_rate == "0%"

    with pytest.raises(AuthorizationError):
        container.report_service.member_report(
            user_id=alice.user_id,
            start_date="2025-01-01",
            end_date="2025-01-31",
            caller_id=bob.user_id,
            caller_role=Role.MEMBER,
        )
    with pytest.raises(NotFoundError, match="User not found"):
        container.report_service.member_report(
            user_id=404,
            start_date="2025-01-01",
            end_date="2025-01-31",
            caller_id=admin.user_id,
            caller_role=Role.ADMIN,
        )


def test_date_bounds_keep_the_calendar_day_as_written():
    date_range = resolve_date_range("2025-01-01T00:00:00+05:00", "2025-01-31T23:00:00-05:00")

    assert date_range.to_dict() == {"start": "2025-01-01", "end": "2025-01-31"}
