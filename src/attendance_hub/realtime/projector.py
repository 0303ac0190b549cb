from __future__ import annotations

import logging
import threading
from typing import Callable, FrozenSet, Optional, Sequence, Set, Tuple

from ..attendance.model import RosterRow
from ..attendance.repository import AttendanceRepository
from ..core.constants import ATTENDANCE_TABLE, SESSIONS_TABLE
from ..core.exceptions import StoreUnavailableError
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from .feed import ChangeEvent, ChangeFeed, Subscription

logger = logging.getLogger(__name__)

SCOPE_SESSIONS = "sessions"
SCOPE_ROSTER = "roster"

ChangeCallback = Callable[[str], None]


class LiveViewProjector:
    """Read-only mirror of one client's view, refreshed from the change feed.

    Two subscription scopes:

    - sessions of ``department`` (``active_sessions`` where department matches)
    - roster of the selected session (``attendance`` where session_id matches)

    Feed callbacks run on the writer's thread, so they only mark the scope
    dirty and call ``on_change(scope)``. The owner of the view re-fetches on
    its own thread with ``refresh_pending``; nothing is patched locally and
    the projector is never a source of truth.

    Use it as a context manager (or call ``close``) so subscriptions are
    released even when the owning view fails.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        department: str,
        on_change: Optional[ChangeCallback] = None,
    ):
        self._feed = feed
        self._sessions_repo = sessions
        self._attendance_repo = attendance
        self._department = department
        self._on_change = on_change

        self._lock = threading.RLock()
        self._sessions: Tuple[AttendanceSession, ...] = ()
        self._roster: Tuple[RosterRow, ...] = ()
        self._selected_session_id: Optional[int] = None
        self._session_sub: Optional[Subscription] = None
        self._roster_sub: Optional[Subscription] = None
        self._dirty: Set[str] = set()
        self._stale = False
        self._closed = False

    # -- snapshots ---------------------------------------------------------

    @property
    def department(self) -> str:
        return self._department

    @property
    def sessions(self) -> Sequence[AttendanceSession]:
        with self._lock:
            return self._sessions

    @property
    def roster(self) -> Sequence[RosterRow]:
        with self._lock:
            return self._roster

    @property
    def selected_session_id(self) -> Optional[int]:
        return self._selected_session_id

    @property
    def dirty(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._dirty)

    @property
    def stale(self) -> bool:
        return self._stale

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriptions(self) -> Tuple[Subscription, ...]:
        return tuple(s for s in (self._session_sub, self._roster_sub) if s is not None)

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> "LiveViewProjector":
        with self._lock:
            if self._closed:
                raise RuntimeError("projector is closed")
            if self._session_sub is None:
                self._session_sub = self._feed.subscribe(
                    SESSIONS_TABLE,
                    column="department",
                    value=self._department,
                    callback=self._on_session_change,
                )
        self.refresh_sessions()
        return self

    def select_session(self, session_id: Optional[int]) -> None:
        """Re-scope the roster feed; the previous roster subscription is closed first."""

        with self._lock:
            if self._closed:
                raise RuntimeError("projector is closed")
            if self._roster_sub is not None:
                self._roster_sub.close()
                self._roster_sub = None

            self._selected_session_id = int(session_id) if session_id is not None else None
            if self._selected_session_id is None:
                self._roster = ()
                self._dirty.discard(SCOPE_ROSTER)
                return

            self._roster_sub = self._feed.subscribe(
                ATTENDANCE_TABLE,
                column="session_id",
                value=self._selected_session_id,
                callback=self._on_attendance_change,
            )
        self.refresh_roster()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._dirty.clear()
            subs, self._session_sub, self._roster_sub = self.subscriptions, None, None
        for sub in subs:
            sub.close()

    def __enter__(self) -> "LiveViewProjector":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- refresh -----------------------------------------------------------

    def refresh(self) -> None:
        self.refresh_sessions()
        if self._selected_session_id is not None:
            self.refresh_roster()

    def refresh_pending(self) -> Tuple[str, ...]:
        """Re-fetch every dirty scope; returns the scopes that were refreshed."""

        done = []
        for scope, refresh in ((SCOPE_SESSIONS, self.refresh_sessions), (SCOPE_ROSTER, self.refresh_roster)):
            if scope in self.dirty and refresh():
                done.append(scope)
        return tuple(done)

    def refresh_sessions(self) -> bool:
        with self._lock:
            self._dirty.discard(SCOPE_SESSIONS)
        try:
            items = tuple(self._sessions_repo.list_for_department(self._department))
        except StoreUnavailableError:
            self._mark_failed(SCOPE_SESSIONS)
            raise
        with self._lock:
            self._sessions = items
            self._stale = False
        return True

    def refresh_roster(self) -> bool:
        with self._lock:
            self._dirty.discard(SCOPE_ROSTER)
            session_id = self._selected_session_id
        if session_id is None:
            return False
        try:
            rows = tuple(self._attendance_repo.roster_for_session(session_id))
        except StoreUnavailableError:
            self._mark_failed(SCOPE_ROSTER)
            raise
        with self._lock:
            # selection may have moved on while we were fetching
            if session_id != self._selected_session_id:
                return False
            self._roster = rows
            self._stale = False
        return True

    def _mark_failed(self, scope: str) -> None:
        with self._lock:
            self._stale = True
            if not self._closed:
                self._dirty.add(scope)

    def _on_session_change(self, event: ChangeEvent) -> None:
        logger.debug("%s on %s -> sessions of %s dirty", event.kind.value, event.table, self._department)
        self._mark_dirty(SCOPE_SESSIONS)

    def _on_attendance_change(self, event: ChangeEvent) -> None:
        logger.debug("%s on %s -> roster of %s dirty", event.kind.value, event.table, self._selected_session_id)
        self._mark_dirty(SCOPE_ROSTER)

    def _mark_dirty(self, scope: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._dirty.add(scope)
        if self._on_change is not None:
            self._on_change(scope)
