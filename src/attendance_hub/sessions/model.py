from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: an attendance window opened by an HOC.

    ``unique_code`` is the 6-digit PIN students submit to join.
    """

    session_id: int
    created_at: datetime
    course_code: str
    unique_code: str
    department: str
    hoc_id: int
    is_active: bool = True

    def feed_row(self) -> dict:
        """Columns published on the change feed (used for subscription filters)."""
        return {
            "session_id": self.session_id,
            "department": self.department,
            "hoc_id": self.hoc_id,
            "is_active": self.is_active,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "created_at": isoformat(self.created_at),
            "course_code": self.course_code,
            "unique_code": self.unique_code,
            "department": self.department,
            "hoc_id": self.hoc_id,
            "is_active": self.is_active,
        }
