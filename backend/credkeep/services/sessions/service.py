"""
SessionService
==============

Caller-side orchestration on top of :class:`CredentialStore`:

- Registers principals after validating the client's redirect target.
- Signs principals in, creating OAuth principals on their first callback.
- Runs post-issuance hooks explicitly and in order (no callback registry).
- Signs single clients out and destroys accounts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from credkeep.services._shared.base import BaseService
from credkeep.services._shared.dto import EMAIL_PROVIDER, Principal
from credkeep.services._shared.errors import NotFoundError, ServiceError
from credkeep.services._shared.ports.principal_repository import PrincipalRepository
from credkeep.services.credentials.service import CredentialStore
from credkeep.services.redirects.policy import RedirectPolicy
from credkeep.services.sessions.dto import RegisterIn, SessionOut, SignInIn

log = logging.getLogger(__name__)

PostIssueHook = Callable[[SessionOut], None]


class SessionService(BaseService):
    """
    Registration and sign-in lifecycle for principals.

    :param repository: Principal persistence port.
    :param store: Credential store issuing and revoking pairs.
    :param redirects: Allow-list applied to client redirect URLs.
    :param hooks: Callables invoked after every issuance, in order.
    :param default_redirect_url: Used when a registration supplies none.
    :param require_redirect: Reject registrations without any redirect URL
        (needed when accounts must be confirmed by email).
    """

    def __init__(
        self,
        *,
        repository: PrincipalRepository,
        store: CredentialStore,
        redirects: RedirectPolicy | None = None,
        hooks: Sequence[PostIssueHook] = (),
        default_redirect_url: str | None = None,
        require_redirect: bool = False,
    ) -> None:
        self.repository = repository
        self.store = store
        self.redirects = redirects or RedirectPolicy()
        self.hooks = tuple(hooks)
        self.default_redirect_url = default_redirect_url
        self.require_redirect = require_redirect

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create a principal and issue its first credential.

        :raises ServiceError: If a redirect is required but missing.
        :raises RedirectNotAllowedError: If the redirect is outside the allow-list.
        :raises ConflictError: If the uid is already registered.
        """
        redirect_url = dto.redirect_url or self.default_redirect_url
        if redirect_url is None:
            if self.require_redirect:
                raise ServiceError("Missing redirect URL for account confirmation.")
        else:
            self.redirects.ensure_allowed(redirect_url)

        principal = self.repository.add(Principal(uid=dto.uid, provider=dto.provider))
        log.info("session.registered", extra={"uid": principal.uid})
        return self._start_session(principal, redirect_url=redirect_url, created=True)

    # ------------------------------------------------------------------ #
    # Sign in / out
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> SessionOut:
        """
        Issue a credential for an existing principal.

        A principal authenticated by an OAuth provider is created on its first
        sign-in; local (``email``) principals must already be registered.

        :raises NotFoundError: If a local principal does not exist.
        :raises ServiceError: If the principal belongs to another provider.
        """
        created = False
        try:
            principal = self.repository.load(dto.uid)
        except NotFoundError:
            if dto.provider == EMAIL_PROVIDER:
                raise
            principal = self.repository.add(Principal(uid=dto.uid, provider=dto.provider))
            created = True
            log.info("session.provider_principal_created", extra={"uid": principal.uid})

        if principal.provider != dto.provider:
            raise ServiceError(f"Principal is registered with provider '{principal.provider}'.")

        return self._start_session(principal, client_id=dto.client_id, created=created)

    def sign_out(self, uid: str, client_id: str) -> None:
        """Revoke one client of the principal."""
        principal = self.repository.load(uid)
        self.store.revoke(principal, client_id)

    def destroy(self, uid: str) -> int:
        """
        Revoke every client and delete the principal.

        :returns: Number of credential pairs that were revoked.
        :raises NotFoundError: If the principal does not exist.
        """
        principal = self.repository.load(uid)
        revoked = self.store.revoke_all(principal)
        self.repository.delete(principal.uid)
        log.info("session.destroyed", extra={"uid": principal.uid})
        return revoked

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _start_session(
        self,
        principal: Principal,
        *,
        client_id: str | None = None,
        redirect_url: str | None = None,
        created: bool = False,
    ) -> SessionOut:
        issued = self.store.issue(principal, client_id)
        session = SessionOut(
            uid=principal.uid,
            provider=principal.provider,
            client_id=issued.client_id,
            token=issued.token,
            expiry=issued.expiry,
            redirect_url=redirect_url,
            created=created,
        )
        for hook in self.hooks:
            hook(session)
        return session
