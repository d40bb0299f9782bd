from __future__ import annotations

from typing import Any, Collection, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from ..users.model import UserSummary
from .model import Attendance, AttendanceWithUser
from .repository import AttendanceRepository

_ATTENDANCE_COLUMNS = "a.attendance_id, a.meeting_id, a.user_id, a.status, a.update_count"


def _to_attendance(row: Dict[str, Any]) -> Attendance:
    return Attendance(
        attendance_id=int(row["attendance_id"]),
        meeting_id=int(row["meeting_id"]),
        user_id=int(row["user_id"]),
        status=AttendanceStatus(row["status"]),
        update_count=int(row["update_count"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_meeting_and_user(self, *, meeting_id: int, user_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM attendances a
                WHERE a.meeting_id=%s AND a.user_id=%s
                """,
                (int(meeting_id), int(user_id)),
            )
            row = fetchone(cur)
            return _to_attendance(row) if row else None

    def create_attendance(self, *, meeting_id: int, user_id: int, status: AttendanceStatus) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances (meeting_id, user_id, status, update_count)
                    VALUES (%s, %s, %s, 0)
                    """,
                    (int(meeting_id), int(user_id), status.value),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Attendance was recorded concurrently, please retry") from exc
            raise

    def apply_update(self, *, attendance_id: int, status: AttendanceStatus, max_updates: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET status=%s, update_count=update_count + 1
                WHERE attendance_id=%s AND update_count < %s
                """,
                (status.value, int(attendance_id), int(max_updates)),
            )
            return cur.rowcount > 0

    def list_for_meeting(self, *, meeting_id: int) -> Sequence[AttendanceWithUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}, u.name, u.email
                FROM attendances a
                JOIN users u ON u.user_id = a.user_id
                WHERE a.meeting_id=%s
                ORDER BY u.name ASC
                """,
                (int(meeting_id),),
            )
            return [
                AttendanceWithUser(
                    attendance=_to_attendance(r),
                    user=UserSummary(user_id=int(r["user_id"]), name=r["name"], email=r["email"]),
                )
                for r in fetchall(cur)
            ]

    def list_for_meetings(
        self,
        *,
        meeting_ids: Collection[int],
        user_id: Optional[int] = None,
    ) -> Sequence[Attendance]:
        ids = [int(m) for m in meeting_ids]
        if not ids:
            return []

        sql = f"SELECT {_ATTENDANCE_COLUMNS} FROM attendances a WHERE a.meeting_id IN ({in_clause(ids)})"
        params: list[object] = list(ids)
        if user_id is not None:
            sql += " AND a.user_id=%s"
            params.append(int(user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_attendance(r) for r in fetchall(cur)]
