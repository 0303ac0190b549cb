from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (the store keeps DATETIME columns in UTC).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None
