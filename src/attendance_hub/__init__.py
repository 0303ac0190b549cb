"""AttendanceHub package.

PIN-gated classroom attendance: an HOC opens a department-scoped session,
students submit its 6-digit PIN, and every connected client sees the roster
refresh through the store's change feed.

Organized by feature modules (profiles, sessions, attendance, ...) with a thin
Flask controller layer over service/repository layers.
"""

__version__ = "0.3.0"
