"""RFC 7807 problem responses for the Flask integration."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from credkeep.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


def _status_code_name(status: int) -> str:
    """``HTTPStatus.UNPROCESSABLE_ENTITY`` -> ``"unprocessable_entity"``."""
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def problem_response(
    status: int,
    code: str,
    detail: str,
    *,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> tuple[Response, int]:
    """
    Render a Problem Details body with the request id and instance path.

    :param status: HTTP status code.
    :param code: Stable machine-readable reason (e.g. ``token_mismatch``).
    :param detail: Client-safe explanation.
    :param extra: Extension members merged into the body.
    :param headers: Additional response headers.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if extra:
        body.update(extra)
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    if headers:
        resp.headers.update(headers)
    return resp, status


class APIError(Exception):
    """
    HTTP-facing error carrying its status and reason code.

    :param message: Client-safe description.
    :param status_code: HTTP status (``400`` by default).
    :param code: Machine-readable reason.
    :param details: Extra members added to the problem body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def headers(self) -> dict[str, str]:
        return {}


class NotFound(APIError):
    """404 for an unknown principal."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for a taken uid or a lost optimistic-lock race."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    """401 for rejected credentials; advertises the token scheme."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)

    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": f'Bearer error="invalid_token", error_description="{self.code}"'}


class UnprocessableEntity(APIError):
    """422 for well-formed but rejected input such as a disallowed redirect."""

    def __init__(self, message: str, code: str = "unprocessable_entity") -> None:
        super().__init__(message, status_code=HTTPStatus.UNPROCESSABLE_ENTITY, code=code)


def init_app(app: Flask) -> None:
    """
    Register problem+json handlers on ``app``.

    Service errors go through
    :meth:`credkeep.services._shared.base.BaseService.translate_exceptions`;
    4xx outcomes are logged as warnings, 5xx with the traceback.
    """
    from credkeep.services._shared.base import BaseService
    from credkeep.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if err.status_code >= 500:
            log.error("api.error", extra={"endpoint": request.endpoint}, exc_info=True)
        else:
            log.warning(
                "api.rejected %s %s", err.status_code, err.code, extra={"endpoint": request.endpoint}
            )
        return problem_response(
            err.status_code, err.code, err.message, extra=err.details or None, headers=err.headers()
        )

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        return handle_api_error(translated)  # type: ignore[arg-type]

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        detail = err.description or HTTPStatus(status).phrase
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        return problem_response(status, _status_code_name(status), detail)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            extra={"errors": err.messages},
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("api.unhandled", extra={"endpoint": request.endpoint}, exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
