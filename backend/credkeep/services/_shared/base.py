# credkeep/services/_shared/base.py
from __future__ import annotations

from datetime import UTC, datetime

from credkeep.core import errors as api_errors
from credkeep.services._shared.errors import (
    ConflictError,
    CredentialError,
    NotFoundError,
    RedirectNotAllowedError,
    ServiceError,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide a single UTC clock (``now_utc``) so time can be frozen in tests.
    * Centralize error translation towards the HTTP layer.
    * Keep services thin and framework-free.
    """

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, CredentialError):
            # → 401 Unauthorized, keeping the specific reason code
            return api_errors.Unauthorized(str(exc), code=exc.code)

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, RedirectNotAllowedError):
            return api_errors.UnprocessableEntity(str(exc), code="redirect_url_not_allowed")

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        return exc
