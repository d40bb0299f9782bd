from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .committees.mysql_committee_repository import MySQLCommitteeRepository, MySQLMembershipRepository
from .committees.repository import CommitteeRepository, MembershipRepository
from .committees.service import CommitteeService, MembershipService
from .core.constants import TOKEN_TTL_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.repository import MeetingRepository
from .meetings.service import MeetingService
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .users.tokens import TokenCodec


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    committees_repo: CommitteeRepository
    memberships_repo: MembershipRepository
    meetings_repo: MeetingRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    membership_service: MembershipService
    committee_service: CommitteeService
    meeting_service: MeetingService
    attendance_service: AttendanceService
    report_service: ReportService


def wire_container(
    *,
    users_repo: UserRepository,
    committees_repo: CommitteeRepository,
    memberships_repo: MembershipRepository,
    meetings_repo: MeetingRepository,
    attendance_repo: AttendanceRepository,
    tokens: TokenCodec,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service from already-constructed repositories."""
    return Container(
        conn=conn,
        users_repo=users_repo,
        committees_repo=committees_repo,
        memberships_repo=memberships_repo,
        meetings_repo=meetings_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo, tokens),
        membership_service=MembershipService(memberships_repo, committees_repo, users_repo),
        committee_service=CommitteeService(committees_repo, memberships_repo, meetings_repo),
        meeting_service=MeetingService(meetings_repo, committees_repo, memberships_repo, attendance_repo),
        attendance_service=AttendanceService(attendance_repo, meetings_repo, committees_repo, memberships_repo),
        report_service=ReportService(meetings_repo, attendance_repo, committees_repo, memberships_repo, users_repo),
    )


def build_container(*, db_config: dict, jwt_secret: str, token_ttl_days: int = TOKEN_TTL_DAYS) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        committees_repo=MySQLCommitteeRepository(conn),
        memberships_repo=MySQLMembershipRepository(conn),
        meetings_repo=MySQLMeetingRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        tokens=TokenCodec(jwt_secret, ttl_days=token_ttl_days),
        conn=conn,
    )
