from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: an identity (HOC or student).

    Note: plain data object, no DB access. ``signature`` is an opaque image
    blob (base64 data URL) captured at registration.
    """

    profile_id: int
    full_name: str
    matric_no: str
    level: int
    department: str
    role: Role
    signature: str = field(default="", repr=False)
    password_hash: str = field(default="", repr=False)
    created_at: Optional[datetime] = None

    @property
    def is_hoc(self) -> bool:
        return self.role == Role.HOC

    def public_dict(self) -> dict:
        return {
            "id": self.profile_id,
            "full_name": self.full_name,
            "matric_no": self.matric_no,
            "level": self.level,
            "department": self.department,
            "role": self.role.value,
            "signature": self.signature,
        }
