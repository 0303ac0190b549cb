from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence, Set

from ..core.constants import ATTENDANCE_TABLE, SESSIONS_TABLE
from ..core.enums import ChangeKind
from ..core.exceptions import MissingReferenceError
from ..database.memory import MemoryStore
from ..realtime.feed import ChangeEvent, ChangeFeed
from .model import AttendanceSession
from .repository import SessionRepository


def _newest_first(session: AttendanceSession):
    return (session.created_at, session.session_id)


class MemorySessionRepository(SessionRepository):
    def __init__(self, store: MemoryStore, feed: ChangeFeed):
        self._store = store
        self._feed = feed

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with self._store.lock:
            return self._store.sessions.get(int(session_id))

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
        with self._store.lock:
            if int(hoc_id) not in self._store.profiles:
                raise MissingReferenceError(column="hoc_id")
            session = AttendanceSession(
                session_id=self._store.next_id("sessions"),
                created_at=created_at,
                course_code=course_code,
                unique_code=unique_code,
                department=department,
                hoc_id=int(hoc_id),
                is_active=is_active,
            )
            self._store.sessions[session.session_id] = session
        self._feed.publish(ChangeEvent(SESSIONS_TABLE, ChangeKind.INSERT, session.feed_row()))
        return session

    def set_active(self, session_id: int, *, is_active: bool) -> bool:
        with self._store.lock:
            session = self._store.sessions.get(int(session_id))
            if not session:
                return False
            session = replace(session, is_active=bool(is_active))
            self._store.sessions[session.session_id] = session
        self._feed.publish(ChangeEvent(SESSIONS_TABLE, ChangeKind.UPDATE, session.feed_row()))
        return True

    def delete_by_id(self, session_id: int) -> bool:
        with self._store.lock:
            session = self._store.sessions.pop(int(session_id), None)
            if not session:
                return False
            doomed = [e.entry_id for e in self._store.attendance.values() if e.session_id == session.session_id]
            for entry_id in doomed:
                del self._store.attendance[entry_id]

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
        with self._store.lock:
            items = [s for s in self._store.sessions.values() if s.department == department]
        return sorted(items, key=_newest_first, reverse=True)

    def latest_active_for_hoc(self, hoc_id: int) -> Optional[AttendanceSession]:
        with self._store.lock:
            items = [s for s in self._store.sessions.values() if s.hoc_id == int(hoc_id) and s.is_active]
        return max(items, key=_newest_first, default=None)

    def find_active_by_code(self, department: str, unique_code: str) -> Optional[AttendanceSession]:
        with self._store.lock:
            items = [
                s
                for s in self._store.sessions.values()
                if s.department == department and s.unique_code == unique_code and s.is_active
            ]
        return max(items, key=_newest_first, default=None)

    def active_codes_for_department(self, department: str) -> Set[str]:
        with self._store.lock:
            return {s.unique_code for s in self._store.sessions.values() if s.department == department and s.is_active}

    def count(self) -> int:
        with self._store.lock:
            return len(self._store.sessions)
