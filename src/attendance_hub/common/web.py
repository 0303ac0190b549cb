from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict

from flask import Flask, g, jsonify, request, session

from ..client.context import ClientContext, ClientIdentity
from ..core.enums import Role
from ..core.exceptions import (
    AlreadySignedError,
    AuthenticationError,
    DomainError,
    ForbiddenError,
    InvalidPinError,
    NotFoundError,
    OperationFailedError,
    SessionClosedError,
    SessionGoneError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: the first isinstance match wins.
_HTTP_STATUS = (
    (InvalidPinError, 400),
    (SessionClosedError, 409),
    (AlreadySignedError, 409),
    (SessionGoneError, 410),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (StoreUnavailableError, 503),
)


def http_status_for(exc: Exception) -> int:
    for exc_type, status in _HTTP_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 500


def error_response(exc: Exception):
    code = getattr(exc, "code", OperationFailedError.code)
    return jsonify({"success": False, "error": code, "message": str(exc)}), http_status_for(exc)


def install_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        return error_response(exc)

    @app.errorhandler(StoreError)
    def _store_error(exc: StoreError):
        if not isinstance(exc, StoreUnavailableError):
            logger.error("Store error on %s %s: %s", request.method, request.path, exc)
            exc = OperationFailedError()
        return error_response(exc)


def client_context() -> ClientContext:
    return ClientContext(session)


def current_identity() -> ClientIdentity:
    return g.identity


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = client_context().identity
        if identity is None:
            return error_response(AuthenticationError("Please log in to continue."))
        g.identity = identity
        return view(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = client_context().identity
            if identity is None:
                return error_response(AuthenticationError("Please log in to continue."))
            if identity.role != role:
                return error_response(ForbiddenError())
            g.identity = identity
            return view(*args, **kwargs)

        return wrapper

    return decorator


hoc_required = role_required(Role.HOC)
student_required = role_required(Role.STUDENT)
