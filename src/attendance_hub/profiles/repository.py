from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for profiles (the identity directory).

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_matric_no(self, matric_no: str) -> Optional[Profile]:
        raise NotImplementedError

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
        """Raises DuplicateKeyError when the matric number is taken."""

        raise NotImplementedError

    def update_level(self, profile_id: int, *, level: int) -> bool:
        raise NotImplementedError

    def list_students_for_department(self, department: str) -> Sequence[Profile]:
        """Students of a department ordered by matric number."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
