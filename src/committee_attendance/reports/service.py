from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Optional

from ..attendance.repository import AttendanceRepository
from ..committees.repository import CommitteeRepository, MembershipRepository
from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_id
from ..core.enums import REPORTABLE_MEETING_STATUSES, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..meetings.repository import MeetingRepository
from ..users.repository import UserRepository
from .calculator.base import AttendanceRateCalculator
from .calculator.standard_calculator import StandardAttendanceRateCalculator
from .model import CommitteeAttendance, CommitteeReport, DateRange, MemberReport, MemberStatistics
from .statistics import build_timeline, fold, summarize

logger = logging.getLogger(__name__)


def resolve_date_range(start_date: Optional[str], end_date: Optional[str]) -> DateRange:
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required")
    start = parse_iso_date(start_date, "startDate")
    end = parse_iso_date(end_date, "endDate")
    if start > end:
        raise ValidationError("Start date must not be after end date")
    return DateRange(start=start, end=end)


class ReportService:
    """Attendance-rate reports over an inclusive date range.

    Only COMPLETED and ONGOING meetings are counted; a meeting without an
    attendance row counts as ABSENT for that member.
    """

    def __init__(
        self,
        meetings: MeetingRepository,
        attendance: AttendanceRepository,
        committees: CommitteeRepository,
        memberships: MembershipRepository,
        users: UserRepository,
        *,
        calculator: Optional[AttendanceRateCalculator] = None,
    ):
        self._meetings = meetings
        self._attendance = attendance
        self._committees = committees
        self._memberships = memberships
        self._users = users
        self._calculator = calculator or StandardAttendanceRateCalculator()

    def committee_report(
        self,
        *,
        committee_id: int,
        start_date: Optional[str],
        end_date: Optional[str],
        caller_id: int,
        caller_role: Role,
    ) -> CommitteeReport:
        date_range = resolve_date_range(start_date, end_date)

        if caller_role != Role.ADMIN and not self._memberships.is_active_member(
            committee_id=int(committee_id),
            user_id=int(caller_id),
        ):
            raise AuthorizationError("Access denied")

        committee = self._committees.get_by_id(int(committee_id))
        if not committee:
            raise NotFoundError("Committee not found")

        meetings = self._meetings.list_in_range(
            committee_ids=[committee.committee_id],
            start_date=date_range.start,
            end_date=date_range.end,
            statuses=REPORTABLE_MEETING_STATUSES,
        )
        by_user: dict[int, dict] = defaultdict(dict)
        for record in self._attendance.list_for_meetings(meeting_ids=[m.meeting_id for m in meetings]):
            by_user[record.user_id][record.meeting_id] = record

        members = []
        for active in self._memberships.list_active_members(committee_id=committee.committee_id):
            timeline = build_timeline(meetings, by_user.get(active.user.user_id, {}))
            members.append(
                MemberStatistics(
                    user=active.user,
                    attendances=timeline,
                    statistics=summarize(timeline, self._calculator),
                )
            )

        logger.debug(
            "Committee report %s %s..%s: %d meetings, %d members",
            committee.committee_id,
            date_range.start,
            date_range.end,
            len(meetings),
            len(members),
        )
        return CommitteeReport(
            committee=committee,
            date_range=date_range,
            total_meetings=len(meetings),
            members=members,
        )

    def member_report(
        self,
        *,
        user_id: int,
        start_date: Optional[str],
        end_date: Optional[str],
        committee_id: Any = None,
        caller_id: int,
        caller_role: Role,
    ) -> MemberReport:
        date_range = resolve_date_range(start_date, end_date)
        committee_filter = optional_id(committee_id, "Committee ID")

        if int(user_id) != int(caller_id) and caller_role != Role.ADMIN:
            raise AuthorizationError("Access denied")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        committees = self._memberships.list_active_committees_for_user(
            user_id=user.user_id,
            committee_id=committee_filter,
        )
        meetings = self._meetings.list_in_range(
            committee_ids=[c.committee_id for c in committees],
            start_date=date_range.start,
            end_date=date_range.end,
            statuses=REPORTABLE_MEETING_STATUSES,
        )
        own = {
            a.meeting_id: a
            for a in self._attendance.list_for_meetings(
                meeting_ids=[m.meeting_id for m in meetings],
                user_id=user.user_id,
            )
        }

        per_committee = []
        for committee in committees:
            committee_meetings = [m for m in meetings if m.committee_id == committee.committee_id]
            timeline = build_timeline(committee_meetings, own)
            per_committee.append(
                CommitteeAttendance(
                    committee=committee,
                    meetings=timeline,
                    statistics=summarize(timeline, self._calculator),
                )
            )

        return MemberReport(
            user=user.summary(),
            date_range=date_range,
            committees=per_committee,
            overall=fold((c.statistics for c in per_committee), self._calculator),
        )
