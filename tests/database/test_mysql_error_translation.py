from __future__ import annotations

from mysql.connector import errors

from attendance_hub.core.exceptions import (
    DuplicateKeyError,
    MissingReferenceError,
    OperationFailedError,
    StoreUnavailableError,
)
from attendance_hub.database.mysql_base import translate_error


def test_duplicate_entry():
    exc = errors.IntegrityError(msg="Duplicate entry '3-7' for key 'uq_attendance_student_session'", errno=1062)
    assert isinstance(translate_error(exc), DuplicateKeyError)


def test_foreign_key_failure_names_the_column():
    msg = (
        "Cannot add or update a child row: a foreign key constraint fails "
        "(`attendance_hub`.`attendance`, CONSTRAINT `fk_attendance_session` "
        "FOREIGN KEY (`session_id`) REFERENCES `active_sessions` (`session_id`) ON DELETE CASCADE)"
    )
    err = translate_error(errors.IntegrityError(msg=msg, errno=1452))
    assert isinstance(err, MissingReferenceError)
    assert err.column == "session_id"


def test_foreign_key_failure_without_details():
    err = translate_error(errors.IntegrityError(msg="constraint fails", errno=1452))
    assert isinstance(err, MissingReferenceError)
    assert err.column is None


def test_connectivity_errors_are_unavailable():
    assert isinstance(translate_error(errors.InterfaceError(msg="Can't connect", errno=2003)), StoreUnavailableError)
    assert isinstance(translate_error(errors.OperationalError(msg="Lost connection", errno=2013)), StoreUnavailableError)


def test_anything_else_is_operation_failed():
    err = translate_error(errors.ProgrammingError(msg="Table doesn't exist", errno=1146))
    assert isinstance(err, OperationFailedError)
