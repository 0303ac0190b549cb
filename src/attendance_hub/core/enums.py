from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a profile; decides which actions and views are available."""

    HOC = "HOC"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance entry. Check-in only produces PRESENT."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class ChangeKind(str, Enum):
    """Row-level change reported by the store's notification feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
