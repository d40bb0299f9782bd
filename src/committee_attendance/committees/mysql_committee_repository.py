from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..users.model import UserSummary
from .model import ActiveMember, Committee, CommitteeListing, CommitteeMember
from .repository import CommitteeRepository, MembershipRepository

_COMMITTEE_COLUMNS = "c.committee_id, c.name, c.description, c.meeting_day, c.meeting_time, c.is_active"

_LISTING_SELECT = f"""
    SELECT
        {_COMMITTEE_COLUMNS},
        (SELECT COUNT(*) FROM committee_members m WHERE m.committee_id = c.committee_id) AS member_count,
        (SELECT COUNT(*) FROM meetings mt WHERE mt.committee_id = c.committee_id) AS meeting_count
    FROM committees c
"""


def _to_committee(row: Dict[str, Any]) -> Committee:
    return Committee(
        committee_id=int(row["committee_id"]),
        name=row["name"],
        description=row.get("description"),
        meeting_day=row["meeting_day"],
        meeting_time=row["meeting_time"],
        is_active=bool(row.get("is_active", True)),
    )


def _to_listing(row: Dict[str, Any]) -> CommitteeListing:
    return CommitteeListing(
        committee=_to_committee(row),
        member_count=int(row.get("member_count") or 0),
        meeting_count=int(row.get("meeting_count") or 0),
    )


def _to_member(row: Dict[str, Any]) -> CommitteeMember:
    return CommitteeMember(
        member_id=int(row["member_id"]),
        user_id=int(row["user_id"]),
        committee_id=int(row["committee_id"]),
        is_active=bool(row["is_active"]),
    )


class MySQLCommitteeRepository(CommitteeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, committee_id: int) -> Optional[Committee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COMMITTEE_COLUMNS} FROM committees c WHERE c.committee_id=%s", (int(committee_id),))
            row = fetchone(cur)
            return _to_committee(row) if row else None

    def list_active(self) -> Sequence[CommitteeListing]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_LISTING_SELECT + " WHERE c.is_active = 1 ORDER BY c.committee_id ASC")
            return [_to_listing(r) for r in fetchall(cur)]

    def list_for_member(self, user_id: int) -> Sequence[CommitteeListing]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _LISTING_SELECT
                + """
                JOIN committee_members cm ON cm.committee_id = c.committee_id
                WHERE cm.user_id = %s AND cm.is_active = 1
                ORDER BY cm.member_id ASC
                """,
                (int(user_id),),
            )
            return [_to_listing(r) for r in fetchall(cur)]

    def create_committee(
        self,
        *,
        name: str,
        description: Optional[str],
        meeting_day: str,
        meeting_time: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO committees (name, description, meeting_day, meeting_time)
                VALUES (%s, %s, %s, %s)
                """,
                (name, description, meeting_day, meeting_time),
            )
            return int(cur.lastrowid)


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_membership(self, *, committee_id: int, user_id: int) -> Optional[CommitteeMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, user_id, committee_id, is_active
                FROM committee_members
                WHERE committee_id=%s AND user_id=%s
                """,
                (int(committee_id), int(user_id)),
            )
            row = fetchone(cur)
            return _to_member(row) if row else None

    def is_active_member(self, *, committee_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found
                FROM committee_members
                WHERE committee_id=%s AND user_id=%s AND is_active=1
                """,
                (int(committee_id), int(user_id)),
            )
            return fetchone(cur) is not None

    def create_membership(self, *, committee_id: int, user_id: int) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO committee_members (user_id, committee_id, is_active) VALUES (%s, %s, 1)",
                    (int(user_id), int(committee_id)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("User is already a member of this committee") from exc
            raise

    def reactivate(self, *, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE committee_members SET is_active=1 WHERE member_id=%s AND is_active=0",
                (int(member_id),),
            )
            return cur.rowcount > 0

    def deactivate(self, *, committee_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE committee_members
                SET is_active=0
                WHERE committee_id=%s AND user_id=%s AND is_active=1
                """,
                (int(committee_id), int(user_id)),
            )
            return cur.rowcount > 0

    def list_active_members(self, *, committee_id: int, order_by_name: bool = False) -> Sequence[ActiveMember]:
        order = "u.name ASC" if order_by_name else "cm.member_id ASC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT cm.member_id, cm.user_id, cm.committee_id, cm.is_active, u.name, u.email
                FROM committee_members cm
                JOIN users u ON u.user_id = cm.user_id
                WHERE cm.committee_id=%s AND cm.is_active=1
                ORDER BY {order}
                """,
                (int(committee_id),),
            )
            return [
                ActiveMember(
                    member=_to_member(r),
                    user=UserSummary(user_id=int(r["user_id"]), name=r["name"], email=r["email"]),
                )
                for r in fetchall(cur)
            ]

    def list_active_committees_for_user(
        self,
        *,
        user_id: int,
        committee_id: Optional[int] = None,
    ) -> Sequence[Committee]:
        clauses = ["cm.user_id=%s", "cm.is_active=1"]
        params: list[object] = [int(user_id)]
        if committee_id is not None:
            clauses.append("cm.committee_id=%s")
            params.append(int(committee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COMMITTEE_COLUMNS}
                FROM committee_members cm
                JOIN committees c ON c.committee_id = cm.committee_id
                WHERE {" AND ".join(clauses)}
                ORDER BY c.committee_id ASC
                """,
                tuple(params),
            )
            return [_to_committee(r) for r in fetchall(cur)]
