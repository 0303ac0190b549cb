from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..common.datetime_utils import utc_now
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadySignedError,
    DuplicateKeyError,
    ForbiddenError,
    InvalidPinError,
    MissingReferenceError,
    NotFoundError,
    SessionClosedError,
    SessionGoneError,
)
from ..sessions.repository import SessionRepository
from .model import AttendanceEntry, HistoryRow, RosterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class CheckInService:
    """Use case: a student signs into a session with its PIN.

    Per (student, session) pair the only transition is UNSIGNED -> SIGNED.
    Session existence, activity and the duplicate check are always verified
    against the store; the pre-check for an existing entry is optimistic and
    the store's UNIQUE(student_id, session_id) constraint is authoritative,
    so concurrent submissions for the same pair admit exactly one.
    """

    def __init__(self, attendance: AttendanceRepository, sessions: SessionRepository):
        self._attendance = attendance
        self._sessions = sessions

    def submit(
        self,
        student_id: int,
        session_id: int,
        pin: str,
        *,
        now: datetime | None = None,
    ) -> AttendanceEntry:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionGoneError()

        if pin != session.unique_code:
            logger.info("Student %s sent a wrong PIN for session %s", student_id, session.session_id)
            raise InvalidPinError()

        if not session.is_active:
            raise SessionClosedError()

        if self._attendance.get_for_student_and_session(int(student_id), session.session_id):
            raise AlreadySignedError()

        try:
            entry = self._attendance.create(
                student_id=int(student_id),
                session_id=session.session_id,
                status=AttendanceStatus.PRESENT,
                signed_at=now or utc_now(),
                department=session.department,
            )
        except DuplicateKeyError:
            # lost the race against a concurrent submission for the same pair
            raise AlreadySignedError()
        except MissingReferenceError as exc:
            if exc.column in (None, "session_id"):
                raise SessionGoneError()
            raise NotFoundError("Student profile not found")

        logger.info("Student %s signed session %s (entry %s)", student_id, session.session_id, entry.entry_id)
        return entry

    def submit_by_pin(
        self,
        student_id: int,
        department: str,
        pin: str,
        *,
        now: datetime | None = None,
    ) -> AttendanceEntry:
        """Sign into whichever active session of the department uses ``pin``."""

        require_non_empty(pin, "PIN")
        session = self._sessions.find_active_by_code(department, pin)
        if not session:
            raise InvalidPinError()
        return self.submit(student_id, session.session_id, pin, now=now)

    def void(self, entry_id: int, requester_id: int) -> None:
        entry = self._attendance.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("This sign-in has already been removed. Please refresh.")

        session = self._sessions.get_by_id(entry.session_id)
        if not session:
            raise NotFoundError("This session no longer exists. Please refresh.")
        if session.hoc_id != int(requester_id):
            raise ForbiddenError("Only the HOC who opened this session can remove sign-ins.")

        if not self._attendance.delete_by_id(entry.entry_id):
            raise NotFoundError("This sign-in has already been removed. Please refresh.")
        logger.info("Entry %s of session %s voided by HOC %s", entry.entry_id, session.session_id, requester_id)

    def roster(self, session_id: int) -> Sequence[RosterRow]:
        return self._attendance.roster_for_session(int(session_id))

    def history_for_student(self, student_id: int) -> Sequence[HistoryRow]:
        return self._attendance.history_for_student(int(student_id))
