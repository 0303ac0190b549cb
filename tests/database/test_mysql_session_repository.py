from __future__ import annotations

from datetime import datetime

from attendance_hub.core.enums import ChangeKind
from attendance_hub.realtime.feed import ChangeFeed
from attendance_hub.sessions.mysql_session_repository import MySQLSessionRepository


class FakeCursor:
    """Tiny stand-in for a mysql-connector dictionary cursor over one table.

    UPDATE reports affected rows the way the server does without
    CLIENT_FOUND_ROWS: a row whose value does not change is not counted.
    """

    def __init__(self, rows):
        self._rows = rows
        self._result = []
        self.rowcount = -1

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        if sql.startswith("SELECT"):
            row = self._rows.get(params[-1])
            self._result = [dict(row)] if row else []
        elif sql.startswith("UPDATE active_sessions SET is_active"):
            value, session_id = params
            row = self._rows.get(session_id)
            changed = row is not None and row["is_active"] != value
            if changed:
                row["is_active"] = value
            self.rowcount = 1 if changed else 0
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows):
        self._rows = rows
        self.commits = 0

    def cursor(self, dictionary=True):
        return FakeCursor(self._rows)

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, rows):
        self.rows = rows

    def connect(self, *, with_database=True):
        return FakeConnection(self.rows)


def _row(session_id, is_active=1):
    return {
        "session_id": session_id,
        "created_at": datetime(2026, 3, 1, 8, 0),
        "course_code": "EEC201",
        "unique_code": "123456",
        "department": "EEE",
        "hoc_id": 1,
        "is_active": is_active,
    }


def test_set_active_to_current_value_still_reports_existing_row():
    feed = ChangeFeed()
    events = []
    feed.subscribe("active_sessions", column="department", value="EEE", callback=events.append)
    repo = MySQLSessionRepository(FakeConnectionFactory({7: _row(7, is_active=0)}), feed)

    # a second Close from another tab: the flag is already 0
    assert repo.set_active(7, is_active=False) is True
    assert events[-1].kind == ChangeKind.UPDATE
    assert events[-1].row["is_active"] is False


def test_set_active_changes_the_flag():
    rows = {7: _row(7, is_active=1)}
    repo = MySQLSessionRepository(FakeConnectionFactory(rows), ChangeFeed())

    assert repo.set_active(7, is_active=False) is True
    assert rows[7]["is_active"] == 0


def test_set_active_on_missing_row_returns_false():
    repo = MySQLSessionRepository(FakeConnectionFactory({}), ChangeFeed())
    assert repo.set_active(99, is_active=True) is False
