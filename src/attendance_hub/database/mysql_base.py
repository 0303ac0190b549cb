from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import (
    DuplicateKeyError,
    MissingReferenceError,
    OperationFailedError,
    StoreError,
    StoreUnavailableError,
)
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_FK_COLUMN_RE = re.compile(r"FOREIGN KEY \(`(?P<column>\w+)`\)")

_FK_ERRNOS = {
    errorcode.ER_NO_REFERENCED_ROW,
    errorcode.ER_NO_REFERENCED_ROW_2,
    errorcode.ER_ROW_IS_REFERENCED,
    errorcode.ER_ROW_IS_REFERENCED_2,
}


def translate_error(exc: mysql.connector.Error) -> StoreError:
    """Map a mysql-connector error onto the store error taxonomy."""

    errno = getattr(exc, "errno", None)
    if errno == errorcode.ER_DUP_ENTRY:
        return DuplicateKeyError()

    if errno in _FK_ERRNOS:
        match = _FK_COLUMN_RE.search(str(getattr(exc, "msg", "") or ""))
        return MissingReferenceError(column=match.group("column") if match else None)

    if isinstance(exc, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError)):
        logger.warning("MySQL unavailable: %s", exc)
        return StoreUnavailableError()

    logger.error("Unexpected MySQL error (errno=%s): %s", errno, exc)
    return OperationFailedError()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise translate_error(exc) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise translate_error(exc) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def count_rows(conn_factory: DatabaseConnection, table: str) -> int:
    # table names come from core.constants, never from user input
    with db_cursor(conn_factory) as (_, cur):
        cur.execute(f"SELECT COUNT(*) AS n FROM `{table}`")
        row = fetchone(cur)
        return int(row["n"]) if row else 0
