from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``code`` for API clients and a default
    user-facing message, so callers can tell *why* an operation failed.
    """

    code = "domain_error"
    default_message = "The operation could not be completed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"
    default_message = "The submitted data is invalid."


class AuthenticationError(DomainError):
    """Raised when login credentials (or the HOC secret) are invalid."""

    code = "authentication_error"
    default_message = "Invalid matriculation number or password."


class ForbiddenError(DomainError):
    """Raised when the requester does not own the resource it tries to mutate."""

    code = "forbidden"
    default_message = "You are not allowed to perform this action."


class NotFoundError(DomainError):
    """Raised when a referenced session, entry or profile no longer exists."""

    code = "not_found"
    default_message = "The requested record no longer exists. Please refresh."


class CheckInError(DomainError):
    """Base for failures of a student's PIN submission."""

    code = "checkin_error"


class InvalidPinError(CheckInError):
    code = "invalid_pin"
    default_message = "Invalid PIN. Please obtain the 6-digit code from the front of the class."


class SessionClosedError(CheckInError):
    code = "session_closed"
    default_message = "This portal has been closed by the HOC."


class SessionGoneError(CheckInError):
    code = "session_gone"
    default_message = "This session no longer exists. It may have been deleted by the HOC."


class AlreadySignedError(CheckInError):
    code = "already_signed"
    default_message = "You have already signed for this session."


class StoreError(Exception):
    """Base for failures reported by the backing store."""

    code = "store_error"
    default_message = "Operation failed. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class StoreUnavailableError(StoreError):
    """Transient connectivity failure; safe to retry after re-fetching state."""

    code = "store_unavailable"
    default_message = "The attendance store is unreachable. Please retry."


class OperationFailedError(StoreError):
    """Unexpected store failure, surfaced as a generic 'operation failed'."""

    code = "operation_failed"


class DuplicateKeyError(StoreError):
    """A uniqueness constraint rejected the write."""

    code = "duplicate_key"
    default_message = "A record with the same key already exists."


class MissingReferenceError(StoreError):
    """A foreign-key constraint rejected the write (referenced row is gone)."""

    code = "missing_reference"
    default_message = "A referenced record does not exist."

    def __init__(self, message: Optional[str] = None, *, column: Optional[str] = None):
        super().__init__(message)
        self.column = column
