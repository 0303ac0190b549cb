from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Set

from .model import AttendanceSession


class SessionRepository(Protocol):
    """Durable record of attendance sessions.

    Implementations publish an ``active_sessions`` change event after every
    committed write; deleting a session also deletes (and announces) its
    attendance entries.
    """

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

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
        raise NotImplementedError

    def set_active(self, session_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, session_id: int) -> bool:
        """Hard delete; cascades to every attendance entry of the session."""

        raise NotImplementedError

    def list_for_department(self, department: str) -> Sequence[AttendanceSession]:
        """Newest first."""

        raise NotImplementedError

    def latest_active_for_hoc(self, hoc_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_active_by_code(self, department: str, unique_code: str) -> Optional[AttendanceSession]:
        """Most recent active session of the department using this PIN."""

        raise NotImplementedError

    def active_codes_for_department(self, department: str) -> Set[str]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
