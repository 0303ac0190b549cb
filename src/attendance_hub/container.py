from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .attendance.memory_attendance_repository import MemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import CheckInService
from .core.constants import ATTENDANCE_TABLE, PROFILES_TABLE, SESSIONS_TABLE
from .database.connection import DBConfig, DatabaseConnection
from .database.health import TableStatus, table_statuses
from .database.memory import MemoryStore
from .exports.service import ExportService
from .joinlinks.resolver import DeepLinkResolver
from .profiles.memory_profile_repository import MemoryProfileRepository
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import AuthService, ProfileService
from .realtime.feed import ChangeFeed
from .realtime.projector import ChangeCallback, LiveViewProjector
from .sessions.memory_session_repository import MemorySessionRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.pin import PinGenerator
from .sessions.repository import SessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    feed: ChangeFeed
    conn: Optional[DatabaseConnection]
    store: Optional[MemoryStore]

    profiles_repo: ProfileRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    profile_service: ProfileService
    session_service: SessionService
    checkin_service: CheckInService
    export_service: ExportService
    join_resolver: DeepLinkResolver

    def make_projector(self, department: str, on_change: Optional[ChangeCallback] = None) -> LiveViewProjector:
        return LiveViewProjector(
            self.feed,
            self.sessions_repo,
            self.attendance_repo,
            department=department,
            on_change=on_change,
        )

    def table_statuses(self) -> List[TableStatus]:
        return table_statuses(
            {
                PROFILES_TABLE: self.profiles_repo.count,
                SESSIONS_TABLE: self.sessions_repo.count,
                ATTENDANCE_TABLE: self.attendance_repo.count,
            }
        )


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: str = "mysql",
    hoc_secret: str = "",
    public_base_url: str = "",
    pin_generator: Optional[PinGenerator] = None,
) -> Container:
    feed = ChangeFeed()
    conn: Optional[DatabaseConnection] = None
    store: Optional[MemoryStore] = None

    if backend == "memory":
        store = MemoryStore()
        profiles_repo = MemoryProfileRepository(store)
        sessions_repo = MemorySessionRepository(store, feed)
        attendance_repo = MemoryAttendanceRepository(store, feed)
    elif backend == "mysql":
        if db_config is None:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        profiles_repo = MySQLProfileRepository(conn)
        sessions_repo = MySQLSessionRepository(conn, feed)
        attendance_repo = MySQLAttendanceRepository(conn, feed)
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

    auth_service = AuthService(profiles_repo, hoc_secret=hoc_secret)
    profile_service = ProfileService(profiles_repo)
    session_service = SessionService(sessions_repo, profiles_repo, pin_generator=pin_generator)
    checkin_service = CheckInService(attendance_repo, sessions_repo)

    return Container(
        feed=feed,
        conn=conn,
        store=store,
        profiles_repo=profiles_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        auth_service=auth_service,
        profile_service=profile_service,
        session_service=session_service,
        checkin_service=checkin_service,
        export_service=ExportService(),
        join_resolver=DeepLinkResolver(public_base_url),
    )
