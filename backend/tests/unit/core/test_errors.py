"""Problem+JSON translation of service errors."""

from __future__ import annotations

import pytest
from credkeep.core.errors import APIError
from credkeep.services._shared.base import BaseService
from credkeep.services._shared.errors import (
    ConflictError,
    CredentialExpiredError,
    NotFoundError,
    RedirectNotAllowedError,
    RepositoryConflictError,
    ServiceError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (CredentialExpiredError("web"), 401, "credential_expired"),
        (NotFoundError("Principal", "x"), 404, "not_found"),
        (ConflictError("Principal", "taken"), 409, "conflict"),
        (RepositoryConflictError("x", 1), 409, "conflict"),
        (RedirectNotAllowedError("https://evil.com"), 422, "redirect_url_not_allowed"),
        (ServiceError("nope"), 400, "bad_request"),
    ],
)
def test_translate_exceptions(exc, status, code):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, APIError)
    assert translated.status_code == status
    assert translated.code == code


def test_non_service_errors_pass_through():
    exc = RuntimeError("boom")

    assert BaseService.translate_exceptions(exc) is exc


def test_service_errors_render_as_problem_json(app):
    @app.get("/redirect")
    def redirect_view():
        raise RedirectNotAllowedError("https://evil.com")

    resp = app.test_client().get("/redirect", headers={"X-Request-ID": "req-1"})

    assert resp.status_code == 422
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "redirect_url_not_allowed"
    assert body["instance"] == "/redirect"
    assert body["request_id"] == "req-1"
    assert resp.headers["X-Request-ID"] == "req-1"
