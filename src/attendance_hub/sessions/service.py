from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.validators import normalize_course_code, require_non_empty
from ..core.constants import MAX_PIN_ATTEMPTS
from ..core.exceptions import ForbiddenError, NotFoundError
from ..profiles.repository import ProfileRepository
from .model import AttendanceSession
from .pin import PinGenerator
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    """Use case: session lifecycle (open, close, reopen, delete).

    Only the HOC that opened a session may mutate it; every transition
    re-reads the session from the store before acting.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        profiles: ProfileRepository,
        *,
        pin_generator: PinGenerator | None = None,
        max_pin_attempts: int = MAX_PIN_ATTEMPTS,
    ):
        self._sessions = sessions
        self._profiles = profiles
        self._pins = pin_generator or PinGenerator()
        self._max_pin_attempts = max(1, int(max_pin_attempts))

    def _new_code(self, department: str) -> str:
        taken = self._sessions.active_codes_for_department(department)
        code = self._pins.generate()
        for _ in range(self._max_pin_attempts - 1):
            if code not in taken:
                break
            code = self._pins.generate()
        else:
            if code in taken:
                logger.warning("PIN %s reused among active sessions of %s", code, department)
        return code

    def _owned_session(self, session_id: int, requester_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("This session no longer exists. Please refresh.")
        if session.hoc_id != int(requester_id):
            raise ForbiddenError("Only the HOC who opened this session can change it.")
        return session

    def open(
        self,
        course_code: str,
        department: str,
        hoc_id: int,
        *,
        now: datetime | None = None,
    ) -> AttendanceSession:
        course = normalize_course_code(course_code)
        department = require_non_empty(department, "Department")

        hoc = self._profiles.get_by_id(int(hoc_id))
        if not hoc:
            raise NotFoundError("HOC profile not found")
        if not hoc.is_hoc:
            raise ForbiddenError("Only an HOC can open an attendance session.")

        session = self._sessions.create(
            course_code=course,
            unique_code=self._new_code(department),
            department=department,
            hoc_id=hoc.profile_id,
            created_at=now or utc_now(),
            is_active=True,
        )
        logger.info("HOC %s opened session %s for %s (%s)", hoc.profile_id, session.session_id, course, department)
        return session

    def set_active(self, session_id: int, active: bool, requester_id: int) -> None:
        session = self._owned_session(session_id, requester_id)
        if session.is_active == bool(active):
            return

        if not self._sessions.set_active(session.session_id, is_active=bool(active)):
            # deleted between the read and the write
            raise NotFoundError("This session no longer exists. Please refresh.")
        logger.info("Session %s %s by HOC %s", session.session_id, "reopened" if active else "closed", requester_id)

    def close(self, session_id: int, requester_id: int) -> None:
        self.set_active(session_id, False, requester_id)

    def delete(self, session_id: int, requester_id: int) -> None:
        session = self._owned_session(session_id, requester_id)
        if not self._sessions.delete_by_id(session.session_id):
            raise NotFoundError("This session no longer exists. Please refresh.")
        logger.info("Session %s (%s) deleted by HOC %s", session.session_id, session.course_code, requester_id)

    def resume_active(self, hoc_id: int) -> Optional[AttendanceSession]:
        return self._sessions.latest_active_for_hoc(int(hoc_id))

    def get(self, session_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("This session no longer exists. Please refresh.")
        return session

    def get_owned(self, session_id: int, requester_id: int) -> AttendanceSession:
        return self._owned_session(session_id, requester_id)

    def list_for_department(self, department: str) -> Sequence[AttendanceSession]:
        return self._sessions.list_for_department(department)
