from __future__ import annotations

import logging
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_level, require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DuplicateKeyError, NotFoundError, ValidationError
from .model import Profile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: registration and login against the identity directory."""

    def __init__(self, profiles: ProfileRepository, *, hoc_secret: str = ""):
        self._profiles = profiles
        self._hoc_secret = hoc_secret

    def register(
        self,
        *,
        full_name: str,
        matric_no: str,
        level,
        department: str,
        password: str,
        signature: str,
        is_hoc: bool = False,
        hoc_secret: str = "",
    ) -> Profile:
        full_name = require_non_empty(full_name, "Full name")
        matric_no = require_non_empty(matric_no, "Matriculation number").upper()
        department = require_non_empty(department, "Department")
        level = require_level(level)
        require_min_length(password, "Password", 6)
        signature = require_non_empty(signature, "Signature")

        if is_hoc and (not self._hoc_secret or hoc_secret != self._hoc_secret):
            raise AuthenticationError("Invalid HOC secret code.")

        if self._profiles.get_by_matric_no(matric_no):
            raise ValidationError("This matriculation number is already registered")

        try:
            profile = self._profiles.create(
                full_name=full_name,
                matric_no=matric_no,
                level=level,
                department=department,
                role=Role.HOC if is_hoc else Role.STUDENT,
                signature=signature,
                password_hash=generate_password_hash(password),
            )
        except DuplicateKeyError:
            raise ValidationError("This matriculation number is already registered")

        logger.info("Registered %s profile %s (%s)", profile.role.value, profile.profile_id, department)
        return profile

    def authenticate(self, matric_no: str, password: str) -> Profile:
        profile = self._profiles.get_by_matric_no((matric_no or "").strip().upper())
        if not profile:
            raise AuthenticationError()

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # e.g. unknown hash method on a hand-edited row
            ok = False

        if not ok:
            raise AuthenticationError()
        return profile


class ProfileService:
    """Use case: self-service profile updates and the department directory."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def get(self, profile_id: int) -> Profile:
        profile = self._profiles.get_by_id(int(profile_id))
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def update_level(self, profile_id: int, level) -> Profile:
        level = require_level(level)
        if not self._profiles.update_level(int(profile_id), level=level):
            raise NotFoundError("Profile not found")
        return self.get(profile_id)

    def department_students(self, department: str, query: str = "") -> Sequence[Profile]:
        students = self._profiles.list_students_for_department(department)
        q = (query or "").strip().lower()
        if not q:
            return list(students)
        return [s for s in students if q in s.full_name.lower() or q in s.matric_no.lower()]
