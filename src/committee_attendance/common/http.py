from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyFinalizedError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..users.model import Principal
from ..users.service import AuthService

logger = logging.getLogger(__name__)

# Conflict, InvalidState and AlreadyFinalized answer 400 like the original API.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (ConflictError, 400),
    (InvalidStateError, 400),
    (AlreadyFinalizedError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def bearer_token() -> Optional[str]:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def current_principal() -> Principal:
    return g.principal


@dataclass(frozen=True)
class Guards:
    login_required: Callable
    admin_required: Callable


def make_guards(auth_service: AuthService) -> Guards:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.principal = auth_service.resolve_principal(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = auth_service.resolve_principal(bearer_token())
            if not principal.is_admin:
                raise AuthorizationError("Insufficient permissions")
            g.principal = principal
            return view(*args, **kwargs)

        return wrapper

    return Guards(login_required=login_required, admin_required=admin_required)


def status_for(exc: DomainError) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status
    return 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status == 500:
            # StoreUnavailableError: never leak driver detail to clients.
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.path, exc)
            return jsonify({"message": "Internal server error"}), 500
        return jsonify({"message": str(exc)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return jsonify({"message": f"Internal server error: {exc}"}), 500
        return jsonify({"message": "Internal server error"}), 500
