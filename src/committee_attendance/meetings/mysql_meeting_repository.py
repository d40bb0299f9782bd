from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Collection, Dict, Optional, Sequence

from ..core.enums import MeetingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Meeting, MeetingListing
from .repository import MeetingRepository

_MEETING_COLUMNS = "mt.meeting_id, mt.committee_id, mt.meeting_date, mt.status, mt.notes"

_LISTING_SELECT = f"""
    SELECT
        {_MEETING_COLUMNS},
        c.name AS committee_name,
        (SELECT COUNT(*) FROM attendances a WHERE a.meeting_id = mt.meeting_id) AS attendance_count
    FROM meetings mt
    JOIN committees c ON c.committee_id = mt.committee_id
"""


def _to_meeting(row: Dict[str, Any]) -> Meeting:
    return Meeting(
        meeting_id=int(row["meeting_id"]),
        committee_id=int(row["committee_id"]),
        date=row["meeting_date"],
        status=MeetingStatus(row["status"]),
        notes=row.get("notes"),
    )


def _to_listing(row: Dict[str, Any]) -> MeetingListing:
    return MeetingListing(
        meeting=_to_meeting(row),
        committee_name=row["committee_name"],
        attendance_count=int(row.get("attendance_count") or 0),
    )


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_MEETING_COLUMNS} FROM meetings mt WHERE mt.meeting_id=%s", (int(meeting_id),))
            row = fetchone(cur)
            return _to_meeting(row) if row else None

    def list_for_committee(
        self,
        *,
        committee_id: int,
        status: Optional[MeetingStatus] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[MeetingListing]:
        clauses = ["mt.committee_id=%s"]
        params: list[object] = [int(committee_id)]
        if status is not None:
            clauses.append("mt.status=%s")
            params.append(status.value)
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _LISTING_SELECT
                + f"""
                WHERE {" AND ".join(clauses)}
                ORDER BY mt.meeting_date DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params),
            )
            return [_to_listing(r) for r in fetchall(cur)]

    def count_for_committee(self, *, committee_id: int, status: Optional[MeetingStatus] = None) -> int:
        sql = "SELECT COUNT(*) AS total FROM meetings WHERE committee_id=%s"
        params: list[object] = [int(committee_id)]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def list_upcoming(
        self,
        *,
        committee_ids: Collection[int],
        since: datetime,
        statuses: Collection[MeetingStatus],
        limit: int,
    ) -> Sequence[MeetingListing]:
        ids = [int(c) for c in committee_ids]
        status_values = [s.value for s in statuses]
        if not ids or not status_values:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _LISTING_SELECT
                + f"""
                WHERE mt.committee_id IN ({in_clause(ids)})
                  AND mt.meeting_date >= %s
                  AND mt.status IN ({in_clause(status_values)})
                ORDER BY mt.meeting_date ASC
                LIMIT %s
                """,
                tuple([*ids, since, *status_values, int(limit)]),
            )
            return [_to_listing(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        committee_ids: Collection[int],
        start_date: date,
        end_date: date,
        statuses: Collection[MeetingStatus],
    ) -> Sequence[Meeting]:
        ids = [int(c) for c in committee_ids]
        status_values = [s.value for s in statuses]
        if not ids or not status_values:
            return []

        # Half-open on the day after end_date so the whole end day is included.
        range_start = datetime.combine(start_date, time.min)
        range_end = datetime.combine(end_date + timedelta(days=1), time.min)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MEETING_COLUMNS}
                FROM meetings mt
                WHERE mt.committee_id IN ({in_clause(ids)})
                  AND mt.meeting_date >= %s AND mt.meeting_date < %s
                  AND mt.status IN ({in_clause(status_values)})
                ORDER BY mt.meeting_date ASC, mt.meeting_id ASC
                """,
                tuple([*ids, range_start, range_end, *status_values]),
            )
            return [_to_meeting(r) for r in fetchall(cur)]

    def create_meeting(self, *, committee_id: int, meeting_date: datetime, notes: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO meetings (committee_id, meeting_date, status, notes)
                VALUES (%s, %s, %s, %s)
                """,
                (int(committee_id), meeting_date, MeetingStatus.SCHEDULED.value, notes),
            )
            return int(cur.lastrowid)

    def update_status(self, *, meeting_id: int, status: MeetingStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE meetings SET status=%s WHERE meeting_id=%s", (status.value, int(meeting_id)))
            # rowcount is 0 when the status is unchanged, so confirm existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM meetings WHERE meeting_id=%s", (int(meeting_id),))
            return fetchone(cur) is not None
