from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE_TABLE
from ..core.enums import AttendanceStatus, ChangeKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count_rows, db_cursor, fetchall, fetchone
from ..realtime.feed import ChangeEvent, ChangeFeed
from .model import AttendanceEntry, HistoryRow, RosterRow
from .repository import AttendanceRepository

_COLUMNS = "entry_id, student_id, session_id, status, signed_at, department, created_at"


def _to_entry(row: dict) -> AttendanceEntry:
    return AttendanceEntry(
        entry_id=int(row["entry_id"]),
        student_id=int(row["student_id"]),
        session_id=int(row["session_id"]),
        status=AttendanceStatus(row["status"]),
        signed_at=row["signed_at"],
        department=row["department"],
        created_at=row.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, feed: ChangeFeed):
        self._conn_factory = conn_factory
        self._feed = feed

    def get_by_id(self, entry_id: int) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def get_for_student_and_session(self, student_id: int, session_id: int) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s AND session_id=%s",
                (int(student_id), int(session_id)),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def create(
        self,
        *,
        student_id: int,
        session_id: int,
        status: AttendanceStatus,
        signed_at: datetime,
        department: str,
    ) -> AttendanceEntry:
        # uq_attendance_student_session / fk_attendance_session surface as
        # DuplicateKeyError / MissingReferenceError through db_cursor.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance (student_id, session_id, status, signed_at, department)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (int(student_id), int(session_id), status.value, signed_at, department),
            )
            entry = AttendanceEntry(
                entry_id=int(cur.lastrowid),
                student_id=int(student_id),
                session_id=int(session_id),
                status=status,
                signed_at=signed_at,
                department=department,
            )
        self._feed.publish(ChangeEvent(ATTENDANCE_TABLE, ChangeKind.INSERT, entry.feed_row()))
        return entry

    def delete_by_id(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            if not row:
                return False
            entry = _to_entry(row)
            cur.execute("DELETE FROM attendance WHERE entry_id=%s", (int(entry_id),))
            if cur.rowcount <= 0:
                return False
        self._feed.publish(ChangeEvent(ATTENDANCE_TABLE, ChangeKind.DELETE, entry.feed_row()))
        return True

    def count_for_session(self, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance WHERE session_id=%s", (int(session_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def roster_for_session(self, session_id: int) -> Sequence[RosterRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.entry_id, a.student_id, a.signed_at, a.status,
                       p.full_name, p.matric_no, p.signature
                FROM attendance a
                JOIN profiles p ON p.profile_id = a.student_id
                WHERE a.session_id=%s
                ORDER BY a.signed_at DESC, a.entry_id DESC
                """,
                (int(session_id),),
            )
            return [
                RosterRow(
                    entry_id=int(r["entry_id"]),
                    student_id=int(r["student_id"]),
                    full_name=r["full_name"],
                    matric_no=r["matric_no"],
                    signed_at=r["signed_at"],
                    status=AttendanceStatus(r["status"]),
                    signature=r.get("signature") or "",
                )
                for r in fetchall(cur)
            ]

    def history_for_student(self, student_id: int) -> Sequence[HistoryRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.entry_id, a.session_id, a.signed_at, a.status,
                       s.course_code, s.created_at AS session_created_at
                FROM attendance a
                JOIN active_sessions s ON s.session_id = a.session_id
                WHERE a.student_id=%s
                ORDER BY a.signed_at DESC, a.entry_id DESC
                """,
                (int(student_id),),
            )
            return [
                HistoryRow(
                    entry_id=int(r["entry_id"]),
                    session_id=int(r["session_id"]),
                    course_code=r["course_code"],
                    session_created_at=r["session_created_at"],
                    signed_at=r["signed_at"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def count(self) -> int:
        return count_rows(self._conn_factory, ATTENDANCE_TABLE)
