"""In-process store used by tests, demos and ``STORE_BACKEND=memory``.

Holds the three tables as dicts keyed by id and enforces the same
constraints as ``schema.sql`` (unique matric number, unique
(student_id, session_id), foreign keys, cascading session delete) under one
lock, so the memory repositories behave like the MySQL ones under
concurrent requests.
"""

from __future__ import annotations

import itertools
import threading
from typing import Dict, Iterator

from ..attendance.model import AttendanceEntry
from ..profiles.model import Profile
from ..sessions.model import AttendanceSession


class MemoryStore:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.profiles: Dict[int, Profile] = {}
        self.sessions: Dict[int, AttendanceSession] = {}
        self.attendance: Dict[int, AttendanceEntry] = {}
        self._ids: Dict[str, Iterator[int]] = {
            "profiles": itertools.count(1),
            "sessions": itertools.count(1),
            "attendance": itertools.count(1),
        }

    def next_id(self, table: str) -> int:
        return next(self._ids[table])
