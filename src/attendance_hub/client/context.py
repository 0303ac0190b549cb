from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping, Optional

from ..core.enums import Role, Theme
from ..core.exceptions import ValidationError
from ..profiles.model import Profile


@dataclass(frozen=True)
class ClientIdentity:
    """What we store into the Flask session after login."""

    profile_id: int
    full_name: str
    matric_no: str
    department: str
    role: Role
    level: int

    @property
    def is_hoc(self) -> bool:
        return self.role == Role.HOC


class ClientContext:
    """Per-client state: logged-in identity, theme and the staged deep-link PIN.

    Backed by any mutable mapping (the Flask ``session`` in the web layer).
    ``login`` initializes it, ``logout`` tears it down; the pending PIN is a
    one-shot value cleared by ``consume_pin``.
    """

    IDENTITY_KEY = "identity"
    THEME_KEY = "theme"
    PENDING_PIN_KEY = "pending_pin"

    def __init__(self, storage: MutableMapping):
        self._storage = storage

    @property
    def identity(self) -> Optional[ClientIdentity]:
        raw = self._storage.get(self.IDENTITY_KEY)
        if not raw:
            return None
        try:
            return ClientIdentity(
                profile_id=int(raw["profile_id"]),
                full_name=str(raw["full_name"]),
                matric_no=str(raw["matric_no"]),
                department=str(raw["department"]),
                role=Role(raw["role"]),
                level=int(raw["level"]),
            )
        except (KeyError, TypeError, ValueError):
            # corrupted cookie payload: drop it like a logout
            self._storage.pop(self.IDENTITY_KEY, None)
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def login(self, profile: Profile) -> ClientIdentity:
        self._storage[self.IDENTITY_KEY] = {
            "profile_id": profile.profile_id,
            "full_name": profile.full_name,
            "matric_no": profile.matric_no,
            "department": profile.department,
            "role": profile.role.value,
            "level": profile.level,
        }
        return self.identity

    def logout(self) -> None:
        self._storage.pop(self.IDENTITY_KEY, None)
        self._storage.pop(self.PENDING_PIN_KEY, None)

    def update_level(self, level: int) -> None:
        raw = self._storage.get(self.IDENTITY_KEY)
        if raw:
            self._storage[self.IDENTITY_KEY] = {**raw, "level": int(level)}

    @property
    def theme(self) -> Theme:
        try:
            return Theme(self._storage.get(self.THEME_KEY, Theme.LIGHT.value))
        except ValueError:
            return Theme.LIGHT

    def set_theme(self, value: str) -> Theme:
        try:
            theme = Theme(str(value).lower())
        except ValueError:
            raise ValidationError("Theme must be 'light' or 'dark'")
        self._storage[self.THEME_KEY] = theme.value
        return theme

    def stage_pin(self, pin: str) -> None:
        self._storage[self.PENDING_PIN_KEY] = pin

    def peek_pin(self) -> Optional[str]:
        return self._storage.get(self.PENDING_PIN_KEY)

    def consume_pin(self) -> Optional[str]:
        return self._storage.pop(self.PENDING_PIN_KEY, None)
