from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence, Set

from ..core.constants import ATTENDANCE_TABLE, SESSIONS_TABLE
from ..core.enums import ChangeKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count_rows, db_cursor, fetchall, fetchone
from ..realtime.feed import ChangeEvent, ChangeFeed
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = "session_id, created_at, course_code, unique_code, department, hoc_id, is_active"


def _to_session(row: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(row["session_id"]),
        created_at=row["created_at"],
        course_code=row["course_code"],
        unique_code=str(row["unique_code"]),
        department=row["department"],
        hoc_id=int(row["hoc_id"]),
        is_active=bool(row["is_active"]),
    )


class MySQLSessionRepository(SessionRepository):
    """MySQL-backed session store.

    MySQL has no row-level notifications of its own, so change events are
    published here once the transaction has committed.
    """

    def __init__(self, conn_factory: DatabaseConnection, feed: ChangeFeed):
        self._conn_factory = conn_factory
        self._feed = feed

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM active_sessions WHERE session_id=%s", (int(session_id),))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def create(
        self,
        *,
        course_code: str,
        unique_code: str,
        department: str,
        hoc_id: int,
        created_at: datetime,
        is_active: bool = True,
    ) -> AttendanceSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO active_sessions (created_at, course_code, unique_code, department, hoc_id, is_active)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (created_at, course_code, unique_code, department, int(hoc_id), 1 if is_active else 0),
            )
            session = AttendanceSession(
                session_id=int(cur.lastrowid),
                created_at=created_at,
                course_code=course_code,
                unique_code=unique_code,
                department=department,
                hoc_id=int(hoc_id),
                is_active=is_active,
            )
        self._feed.publish(ChangeEvent(SESSIONS_TABLE, ChangeKind.INSERT, session.feed_row()))
        return session

    def set_active(self, session_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # rowcount of the UPDATE is 0 when the flag already has this value,
            # so existence comes from the locked read instead
            cur.execute(f"SELECT {_COLUMNS} FROM active_sessions WHERE session_id=%s FOR UPDATE", (int(session_id),))
            row = fetchone(cur)
            if not row:
                return False
            cur.execute(
                "UPDATE active_sessions SET is_active=%s WHERE session_id=%s",
                (1 if is_active else 0, int(session_id)),
            )
            session = replace(_to_session(row), is_active=bool(is_active))
        self._feed.publish(ChangeEvent(SESSIONS_TABLE, ChangeKind.UPDATE, session.feed_row()))
        return True

    def delete_by_id(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM active_sessions WHERE session_id=%s FOR UPDATE", (int(session_id),))
            row = fetchone(cur)
            if not row:
                return False
            session = _to_session(row)
            # ON DELETE CASCADE removes the attendance rows with the session.
            cur.execute("DELETE FROM active_sessions WHERE session_id=%s", (int(session_id),))

        self._feed.publish(ChangeEvent(SESSIONS_TABLE, ChangeKind.DELETE, session.feed_row()))
        self._feed.publish(
            ChangeEvent(
                ATTENDANCE_TABLE,
                ChangeKind.DELETE,
                {"session_id": session.session_id, "department": session.department},
            )
        )
        return True

    def list_for_department(self, department: str) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM active_sessions
                WHERE department=%s
                ORDER BY created_at DESC, session_id DESC
                """,
                (department,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def latest_active_for_hoc(self, hoc_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM active_sessions
                WHERE hoc_id=%s AND is_active=1
                ORDER BY created_at DESC, session_id DESC
                LIMIT 1
                """,
                (int(hoc_id),),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def find_active_by_code(self, department: str, unique_code: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM active_sessions
                WHERE department=%s AND unique_code=%s AND is_active=1
                ORDER BY created_at DESC, session_id DESC
                LIMIT 1
                """,
                (department, unique_code),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def active_codes_for_department(self, department: str) -> Set[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT unique_code FROM active_sessions WHERE department=%s AND is_active=1",
                (department,),
            )
            return {str(r["unique_code"]) for r in fetchall(cur)}

    def count(self) -> int:
        return count_rows(self._conn_factory, SESSIONS_TABLE)
