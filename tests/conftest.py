from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Optional

import pytest

from committee_attendance.attendance.model import Attendance, AttendanceWithUser
from committee_attendance.committees.model import ActiveMember, Committee, CommitteeListing, CommitteeMember
from committee_attendance.container import wire_container
from committee_attendance.core.enums import AttendanceStatus, MeetingStatus, Role
from committee_attendance.core.exceptions import ConflictError
from committee_attendance.main import create_app
from committee_attendance.meetings.model import Meeting, MeetingListing
from committee_attendance.users.model import User
from committee_attendance.users.tokens import TokenCodec


class InMemoryStore:
    """Shared tables behind the in-memory repositories below."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self.committees: dict[int, Committee] = {}
        self.members: dict[int, CommitteeMember] = {}
        self.meetings: dict[int, Meeting] = {}
        self.attendances: dict[int, Attendance] = {}
        self._ids = {"users": 0, "committees": 0, "members": 0, "meetings": 0, "attendances": 0}

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    # seeding helpers

    def add_user(self, name: str, *, email: Optional[str] = None, role: Role = Role.MEMBER, password_hash: str = "!") -> User:
        user_id = self.next_id("users")
        user = User(
            user_id=user_id,
            email=email or f"{name.lower()}@example.com",
            name=name,
            password_hash=password_hash,
            role=role,
        )
        self.users[user_id] = user
        return user

    def add_committee(self, name: str, *, meeting_day: str = "Monday", meeting_time: str = "18:00") -> Committee:
        committee_id = self.next_id("committees")
        committee = Committee(
            committee_id=committee_id,
            name=name,
            description=None,
            meeting_day=meeting_day,
            meeting_time=meeting_time,
        )
        self.committees[committee_id] = committee
        return committee

    def add_member(self, committee: Committee, user: User, *, active: bool = True) -> CommitteeMember:
        member_id = self.next_id("members")
        member = CommitteeMember(
            member_id=member_id,
            user_id=user.user_id,
            committee_id=committee.committee_id,
            is_active=active,
        )
        self.members[member_id] = member
        return member

    def add_meeting(self, committee: Committee, when: datetime, status: MeetingStatus = MeetingStatus.COMPLETED) -> Meeting:
        meeting_id = self.next_id("meetings")
        meeting = Meeting(meeting_id=meeting_id, committee_id=committee.committee_id, date=when, status=status)
        self.meetings[meeting_id] = meeting
        return meeting

    def add_attendance(self, meeting: Meeting, user: User, status: AttendanceStatus, *, update_count: int = 0) -> Attendance:
        attendance_id = self.next_id("attendances")
        record = Attendance(
            attendance_id=attendance_id,
            meeting_id=meeting.meeting_id,
            user_id=user.user_id,
            status=status,
            update_count=update_count,
        )
        self.attendances[attendance_id] = record
        return record

    def set_meeting_status(self, meeting: Meeting, status: MeetingStatus) -> None:
        current = self.meetings[meeting.meeting_id]
        self.meetings[meeting.meeting_id] = Meeting(
            meeting_id=current.meeting_id,
            committee_id=current.committee_id,
            date=current.date,
            status=status,
            notes=current.notes,
        )


class InMemoryUsers:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._store.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._store.users.values() if u.email == email), None)

    def create_user(self, *, email: str, name: str, password_hash: str, role: Role) -> int:
        if self.get_by_email(email):
            raise ConflictError("User already exists")
        return self._store.add_user(name, email=email, role=role, password_hash=password_hash).user_id


class InMemoryCommittees:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _listing(self, committee: Committee) -> CommitteeListing:
        return CommitteeListing(
            committee=committee,
            member_count=sum(1 for m in self._store.members.values() if m.committee_id == committee.committee_id),
            meeting_count=sum(1 for m in self._store.meetings.values() if m.committee_id == committee.committee_id),
        )

    def get_by_id(self, committee_id: int) -> Optional[Committee]:
        return self._store.committees.get(committee_id)

    def list_active(self):
        return [self._listing(c) for c in self._store.committees.values() if c.is_active]

    def list_for_member(self, user_id: int):
        ids = {m.committee_id for m in self._store.members.values() if m.user_id == user_id and m.is_active}
        return [self._listing(c) for c in self._store.committees.values() if c.committee_id in ids and c.is_active]

    def create_committee(self, *, name: str, description: Optional[str], meeting_day: str, meeting_time: str) -> int:
        committee = self._store.add_committee(name, meeting_day=meeting_day, meeting_time=meeting_time)
        return committee.committee_id


class InMemoryMemberships:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_membership(self, *, committee_id: int, user_id: int) -> Optional[CommitteeMember]:
        return next(
            (m for m in self._store.members.values() if m.committee_id == committee_id and m.user_id == user_id),
            None,
        )

    def is_active_member(self, *, committee_id: int, user_id: int) -> bool:
        member = self.get_membership(committee_id=committee_id, user_id=user_id)
        return bool(member and member.is_active)

    def create_membership(self, *, committee_id: int, user_id: int) -> int:
        if self.get_membership(committee_id=committee_id, user_id=user_id):
            raise ConflictError("User is already a member of this committee")
        member = self._store.add_member(self._store.committees[committee_id], self._store.users[user_id])
        return member.member_id

    def _set_active(self, member: CommitteeMember, active: bool) -> None:
        self._store.members[member.member_id] = CommitteeMember(
            member_id=member.member_id,
            user_id=member.user_id,
            committee_id=member.committee_id,
            is_active=active,
        )

    def reactivate(self, *, member_id: int) -> bool:
        member = self._store.members.get(member_id)
        if not member or member.is_active:
            return False
        self._set_active(member, True)
        return True

    def deactivate(self, *, committee_id: int, user_id: int) -> bool:
        member = self.get_membership(committee_id=committee_id, user_id=user_id)
        if not member or not member.is_active:
            return False
        self._set_active(member, False)
        return True

    def list_active_members(self, *, committee_id: int, order_by_name: bool = False):
        rows = [
            ActiveMember(member=m, user=self._store.users[m.user_id].summary())
            for m in self._store.members.values()
            if m.committee_id == committee_id and m.is_active
        ]
        if order_by_name:
            rows.sort(key=lambda row: row.user.name)
        return rows

    def list_active_committees_for_user(self, *, user_id: int, committee_id: Optional[int] = None):
        ids = [
            m.committee_id
            for m in self._store.members.values()
            if m.user_id == user_id and m.is_active and (committee_id is None or m.committee_id == committee_id)
        ]
        return [self._store.committees[i] for i in sorted(ids)]


class InMemoryMeetings:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _listing(self, meeting: Meeting) -> MeetingListing:
        return MeetingListing(
            meeting=meeting,
            committee_name=self._store.committees[meeting.committee_id].name,
            attendance_count=sum(1 for a in self._store.attendances.values() if a.meeting_id == meeting.meeting_id),
        )

    def _for_committee(self, committee_id: int, status: Optional[MeetingStatus]):
        return [
            m
            for m in self._store.meetings.values()
            if m.committee_id == committee_id and (status is None or m.status == status)
        ]

    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        return self._store.meetings.get(meeting_id)

    def list_for_committee(self, *, committee_id: int, status: Optional[MeetingStatus] = None, limit: int, offset: int = 0):
        rows = sorted(self._for_committee(committee_id, status), key=lambda m: m.date, reverse=True)
        return [self._listing(m) for m in rows[offset:offset + limit]]

    def count_for_committee(self, *, committee_id: int, status: Optional[MeetingStatus] = None) -> int:
        return len(self._for_committee(committee_id, status))

    def list_upcoming(self, *, committee_ids: Collection[int], since: datetime, statuses, limit: int):
        rows = sorted(
            (
                m
                for m in self._store.meetings.values()
                if m.committee_id in committee_ids and m.date >= since and m.status in statuses
            ),
            key=lambda m: m.date,
        )
        return [self._listing(m) for m in rows[:limit]]

    def list_in_range(self, *, committee_ids: Collection[int], start_date: date, end_date: date, statuses):
        return sorted(
            (
                m
                for m in self._store.meetings.values()
                if m.committee_id in committee_ids and start_date <= m.date.date() <= end_date and m.status in statuses
            ),
            key=lambda m: (m.date, m.meeting_id),
        )

    def create_meeting(self, *, committee_id: int, meeting_date: datetime, notes: Optional[str]) -> int:
        meeting = self._store.add_meeting(self._store.committees[committee_id], meeting_date, MeetingStatus.SCHEDULED)
        return meeting.meeting_id

    def update_status(self, *, meeting_id: int, status: MeetingStatus) -> bool:
        meeting = self._store.meetings.get(meeting_id)
        if not meeting:
            return False
        self._store.set_meeting_status(meeting, status)
        return True


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_for_meeting_and_user(self, *, meeting_id: int, user_id: int) -> Optional[Attendance]:
        return next(
            (a for a in self._store.attendances.values() if a.meeting_id == meeting_id and a.user_id == user_id),
            None,
        )

    def create_attendance(self, *, meeting_id: int, user_id: int, status: AttendanceStatus) -> int:
        if self.get_for_meeting_and_user(meeting_id=meeting_id, user_id=user_id):
            raise ConflictError("Attendance already recorded")
        record = self._store.add_attendance(self._store.meetings[meeting_id], self._store.users[user_id], status)
        return record.attendance_id

    def apply_update(self, *, attendance_id: int, status: AttendanceStatus, max_updates: int) -> bool:
        record = self._store.attendances.get(attendance_id)
        if not record or record.update_count >= max_updates:
            return False
        self._store.attendances[attendance_id] = Attendance(
            attendance_id=record.attendance_id,
            meeting_id=record.meeting_id,
            user_id=record.user_id,
            status=status,
            update_count=record.update_count + 1,
        )
        return True

    def list_for_meeting(self, *, meeting_id: int):
        rows = [
            AttendanceWithUser(attendance=a, user=self._store.users[a.user_id].summary())
            for a in self._store.attendances.values()
            if a.meeting_id == meeting_id
        ]
        return sorted(rows, key=lambda row: row.user.name)

    def list_for_meetings(self, *, meeting_ids: Collection[int], user_id: Optional[int] = None):
        return [
            a
            for a in self._store.attendances.values()
            if a.meeting_id in meeting_ids and (user_id is None or a.user_id == user_id)
        ]


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def tokens() -> TokenCodec:
    return TokenCodec("test-secret")


@pytest.fixture
def container(store, tokens):
    return wire_container(
        users_repo=InMemoryUsers(store),
        committees_repo=InMemoryCommittees(store),
        memberships_repo=InMemoryMemberships(store),
        meetings_repo=InMemoryMeetings(store),
        attendance_repo=InMemoryAttendance(store),
        tokens=tokens,
    )


@pytest.fixture
def client(container):
    app = create_app(container=container, settings_module="committee_attendance.config.testing")
    return app.test_client()


@pytest.fixture
def auth_header(tokens):
    def _header(user: User) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(user.user_id)}"}

    return _header
