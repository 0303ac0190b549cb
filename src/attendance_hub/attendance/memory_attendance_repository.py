from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.constants import ATTENDANCE_TABLE
from ..core.enums import AttendanceStatus, ChangeKind
from ..core.exceptions import DuplicateKeyError, MissingReferenceError
from ..database.memory import MemoryStore
from ..realtime.feed import ChangeEvent, ChangeFeed
from .model import AttendanceEntry, HistoryRow, RosterRow
from .repository import AttendanceRepository


class MemoryAttendanceRepository(AttendanceRepository):
    def __init__(self, store: MemoryStore, feed: ChangeFeed):
        self._store = store
        self._feed = feed

    def get_by_id(self, entry_id: int) -> Optional[AttendanceEntry]:
        with self._store.lock:
            return self._store.attendance.get(int(entry_id))

    def get_for_student_and_session(self, student_id: int, session_id: int) -> Optional[AttendanceEntry]:
        with self._store.lock:
            return next(
                (
                    e
                    for e in self._store.attendance.values()
                    if e.student_id == int(student_id) and e.session_id == int(session_id)
                ),
                None,
            )

    def create(
        self,
        *,
        student_id: int,
        session_id: int,
        status: AttendanceStatus,
        signed_at: datetime,
        department: str,
    ) -> AttendanceEntry:
        with self._store.lock:
            if int(session_id) not in self._store.sessions:
                raise MissingReferenceError(column="session_id")
            if int(student_id) not in self._store.profiles:
                raise MissingReferenceError(column="student_id")
            if self.get_for_student_and_session(student_id, session_id):
                raise DuplicateKeyError()

            entry = AttendanceEntry(
                entry_id=self._store.next_id("attendance"),
                student_id=int(student_id),
                session_id=int(session_id),
                status=status,
                signed_at=signed_at,
                department=department,
                created_at=utc_now(),
            )
            self._store.attendance[entry.entry_id] = entry
        self._feed.publish(ChangeEvent(ATTENDANCE_TABLE, ChangeKind.INSERT, entry.feed_row()))
        return entry

    def delete_by_id(self, entry_id: int) -> bool:
        with self._store.lock:
            entry = self._store.attendance.pop(int(entry_id), None)
        if not entry:
            return False
        self._feed.publish(ChangeEvent(ATTENDANCE_TABLE, ChangeKind.DELETE, entry.feed_row()))
        return True

    def count_for_session(self, session_id: int) -> int:
        with self._store.lock:
            return sum(1 for e in self._store.attendance.values() if e.session_id == int(session_id))

    def roster_for_session(self, session_id: int) -> Sequence[RosterRow]:
        with self._store.lock:
            rows = []
            for e in self._store.attendance.values():
                if e.session_id != int(session_id):
                    continue
                p = self._store.profiles.get(e.student_id)
                rows.append(
                    RosterRow(
                        entry_id=e.entry_id,
                        student_id=e.student_id,
                        full_name=p.full_name if p else "N/A",
                        matric_no=p.matric_no if p else "N/A",
                        signed_at=e.signed_at,
                        status=e.status,
                        signature=p.signature if p else "",
                    )
                )
        rows.sort(key=lambda r: (r.signed_at, r.entry_id), reverse=True)
        return rows

    def history_for_student(self, student_id: int) -> Sequence[HistoryRow]:
        with self._store.lock:
            rows = []
            for e in self._store.attendance.values():
                if e.student_id != int(student_id):
                    continue
                s = self._store.sessions.get(e.session_id)
                if not s:
                    continue
                rows.append(
                    HistoryRow(
                        entry_id=e.entry_id,
                        session_id=s.session_id,
                        course_code=s.course_code,
                        session_created_at=s.created_at,
                        signed_at=e.signed_at,
                        status=e.status,
                    )
                )
        rows.sort(key=lambda r: (r.signed_at, r.entry_id), reverse=True)
        return rows

    def count(self) -> int:
        with self._store.lock:
            return len(self._store.attendance)
