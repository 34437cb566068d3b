"""Pytest fixtures for the credential core and its Flask integration.

SQL-backed tests get a fresh application with its own in-memory SQLite
engine, so tables are created and dropped per test and nothing leaks
between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import timedelta
from typing import Any

import fakeredis
import pytest
from credkeep.core.extensions import db as _db
from credkeep.factory import create_app
from credkeep.services._shared.ports import InMemoryPrincipalRepository
from credkeep.services.credentials import CredentialConfig, CredentialStore

from tests.settings import TestConfig


@pytest.fixture()
def app():
    """Create a Flask application backed by the SQL principal repository.

    Yields
    ------
    flask.Flask
        Application with an active app context and created tables.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig, instance_relative_config=False)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    """Database extension bound to ``app``."""
    return _db


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture()
def repository() -> InMemoryPrincipalRepository:
    return InMemoryPrincipalRepository()


@pytest.fixture()
def credential_config() -> CredentialConfig:
    return CredentialConfig(token_ttl=timedelta(hours=1), grace_window=timedelta(seconds=5))


@pytest.fixture()
def make_store(repository) -> Callable[..., CredentialStore]:
    """Factory building a :class:`CredentialStore` over the in-memory repository.

    Keyword arguments override :class:`CredentialConfig` fields.
    """

    def _factory(**overrides: Any) -> CredentialStore:
        params: dict[str, Any] = {
            "token_ttl": timedelta(hours=1),
            "grace_window": timedelta(seconds=5),
        }
        params.update(overrides)
        return CredentialStore(repository=repository, config=CredentialConfig(**params))

    return _factory


@pytest.fixture()
def store(make_store) -> CredentialStore:
    return make_store()


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01") as frozen:
    ...         frozen.tick(10)
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01 12:00:00")

    return _factory


@pytest.fixture()
def principal_factory(repository) -> Iterator[Callable[..., Any]]:
    """Persist principals in the in-memory repository."""
    from tests.factories import PrincipalFactory

    def _create(**kwargs: Any):
        return repository.add(PrincipalFactory.build(**kwargs))

    yield _create
