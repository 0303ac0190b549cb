from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceEntry, HistoryRow, RosterRow


class AttendanceRepository(Protocol):
    """Append-mostly ledger of attendance entries.

    The store enforces UNIQUE(student_id, session_id) and a cascading foreign
    key to the session; implementations publish an ``attendance`` change
    event after every committed write.
    """

    def get_by_id(self, entry_id: int) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def get_for_student_and_session(self, student_id: int, session_id: int) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        session_id: int,
        status: AttendanceStatus,
        signed_at: datetime,
        department: str,
    ) -> AttendanceEntry:
        """Raises DuplicateKeyError / MissingReferenceError on constraint violations."""

        raise NotImplementedError

    def delete_by_id(self, entry_id: int) -> bool:
        raise NotImplementedError

    def count_for_session(self, session_id: int) -> int:
        raise NotImplementedError

    def roster_for_session(self, session_id: int) -> Sequence[RosterRow]:
        """Newest signature first."""

        raise NotImplementedError

    def history_for_student(self, student_id: int) -> Sequence[HistoryRow]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
