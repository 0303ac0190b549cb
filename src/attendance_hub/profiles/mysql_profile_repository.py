from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import PROFILES_TABLE
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count_rows, db_cursor, fetchall, fetchone
from .model import Profile
from .repository import ProfileRepository

_COLUMNS = "profile_id, full_name, matric_no, level, department, role, signature, password_hash, created_at"


def _to_profile(row: dict) -> Profile:
    return Profile(
        profile_id=int(row["profile_id"]),
        full_name=row["full_name"],
        matric_no=row["matric_no"],
        level=int(row["level"]),
        department=row["department"],
        role=Role(row["role"]),
        signature=row.get("signature") or "",
        password_hash=row.get("password_hash") or "",
        created_at=row.get("created_at"),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id=%s", (int(profile_id),))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_by_matric_no(self, matric_no: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE matric_no=%s", (matric_no,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def create(
        self,
        *,
        full_name: str,
        matric_no: str,
        level: int,
        department: str,
        role: Role,
        signature: str,
        password_hash: str,
    ) -> Profile:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO profiles (full_name, matric_no, level, department, role, signature, password_hash)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (full_name, matric_no, int(level), department, role.value, signature, password_hash),
            )
            profile_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id=%s", (profile_id,))
            return _to_profile(fetchone(cur))

    def update_level(self, profile_id: int, *, level: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE profiles SET level=%s WHERE profile_id=%s", (int(level), int(profile_id)))
            return cur.rowcount > 0

    def list_students_for_department(self, department: str) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM profiles
                WHERE department=%s AND role=%s
                ORDER BY matric_no ASC
                """,
                (department, Role.STUDENT.value),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def count(self) -> int:
        return count_rows(self._conn_factory, PROFILES_TABLE)
