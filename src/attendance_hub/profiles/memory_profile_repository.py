from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.enums import Role
from ..core.exceptions import DuplicateKeyError
from ..database.memory import MemoryStore
from .model import Profile
from .repository import ProfileRepository


class MemoryProfileRepository(ProfileRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with self._store.lock:
            return self._store.profiles.get(int(profile_id))

    def get_by_matric_no(self, matric_no: str) -> Optional[Profile]:
        with self._store.lock:
            return next((p for p in self._store.profiles.values() if p.matric_no == matric_no), None)

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
        with self._store.lock:
            if any(p.matric_no == matric_no for p in self._store.profiles.values()):
                raise DuplicateKeyError()
            profile = Profile(
                profile_id=self._store.next_id("profiles"),
                full_name=full_name,
                matric_no=matric_no,
                level=int(level),
                department=department,
                role=role,
                signature=signature,
                password_hash=password_hash,
                created_at=utc_now(),
            )
            self._store.profiles[profile.profile_id] = profile
            return profile

    def update_level(self, profile_id: int, *, level: int) -> bool:
        with self._store.lock:
            profile = self._store.profiles.get(int(profile_id))
            if not profile:
                return False
            self._store.profiles[profile.profile_id] = replace(profile, level=int(level))
            return True

    def list_students_for_department(self, department: str) -> Sequence[Profile]:
        with self._store.lock:
            items = [
                p for p in self._store.profiles.values() if p.department == department and p.role == Role.STUDENT
            ]
        items.sort(key=lambda p: p.matric_no)
        return items

    def count(self) -> int:
        with self._store.lock:
            return len(self._store.profiles)
