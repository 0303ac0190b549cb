from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceEntry:
    """Domain entity: one student's signature on one session.

    At most one exists per (student_id, session_id); entries are never
    updated in place.
    """

    entry_id: int
    student_id: int
    session_id: int
    status: AttendanceStatus
    signed_at: datetime
    department: str
    created_at: Optional[datetime] = None

    def feed_row(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "student_id": self.student_id,
            "session_id": self.session_id,
            "department": self.department,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "student_id": self.student_id,
            "session_id": self.session_id,
            "status": self.status.value,
            "signed_at": isoformat(self.signed_at),
            "department": self.department,
        }


@dataclass(frozen=True)
class RosterRow:
    """Read-model: entry joined with the student's profile (live roster, registry export)."""

    entry_id: int
    student_id: int
    full_name: str
    matric_no: str
    signed_at: datetime
    status: AttendanceStatus
    signature: str = field(default="", repr=False)

    def to_dict(self, *, include_signature: bool = True) -> dict:
        data = {
            "id": self.entry_id,
            "student_id": self.student_id,
            "full_name": self.full_name,
            "matric_no": self.matric_no,
            "signed_at": isoformat(self.signed_at),
            "status": self.status.value,
        }
        if include_signature:
            data["signature"] = self.signature
        return data


@dataclass(frozen=True)
class HistoryRow:
    """Read-model: a student's entry joined with its session."""

    entry_id: int
    session_id: int
    course_code: str
    session_created_at: datetime
    signed_at: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "session_id": self.session_id,
            "course_code": self.course_code,
            "session_created_at": isoformat(self.session_created_at),
            "signed_at": isoformat(self.signed_at),
            "status": self.status.value,
        }
