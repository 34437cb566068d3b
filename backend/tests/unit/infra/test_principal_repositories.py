"""
Behavior shared by every PrincipalRepository adapter.

The same cases run against:
- the in-memory port implementation,
- the Redis adapter over fakeredis,
- the SQLAlchemy adapter over in-memory SQLite.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from credkeep.infra.redis.redis_principal_repository import RedisPrincipalRepository
from credkeep.infra.sqlalchemy.sqlalchemy_principal_repository import (
    SQLAlchemyPrincipalRepository,
)
from credkeep.services._shared.dto import CredentialPair, Principal
from credkeep.services._shared.errors import (
    ConflictError,
    NotFoundError,
    RepositoryConflictError,
)
from credkeep.services._shared.ports import InMemoryPrincipalRepository

EXPIRY = datetime(2030, 1, 1, tzinfo=UTC)


@pytest.fixture(params=["memory", "redis", "sqlalchemy"])
def repo(request):
    if request.param == "memory":
        return InMemoryPrincipalRepository()
    if request.param == "redis":
        return RedisPrincipalRepository(r=request.getfixturevalue("fake_redis"))
    request.getfixturevalue("app")
    return SQLAlchemyPrincipalRepository()


def _pair(cid: str = "web", **kwargs) -> CredentialPair:
    return CredentialPair(client_id=cid, token_digest=f"digest-{cid}", expiry=EXPIRY, **kwargs)


def test_add_then_load_normalizes_uid(repo):
    created = repo.add(Principal(uid="  Alice@Example.COM "))

    assert created.uid == "alice@example.com"
    assert created.version == 1
    assert created.id is not None

    loaded = repo.load("ALICE@example.com")
    assert loaded.uid == "alice@example.com"
    assert loaded.provider == "email"
    assert loaded.credentials == {}
    assert loaded.version == 1


def test_non_email_uid_keeps_its_case(repo):
    repo.add(Principal(uid="GitHub|AbC", provider="github"))

    assert repo.load("GitHub|AbC").provider == "github"
    with pytest.raises(NotFoundError):
        repo.load("github|abc")


def test_add_duplicate_conflicts(repo):
    repo.add(Principal(uid="alice@example.com"))

    with pytest.raises(ConflictError):
        repo.add(Principal(uid="ALICE@example.com"))


def test_load_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.load("ghost@example.com")


def test_save_round_trips_credentials_and_bumps_version(repo):
    repo.add(Principal(uid="alice@example.com"))
    principal = repo.load("alice@example.com")
    grace_until = EXPIRY - timedelta(days=1)
    principal.credentials = {
        "web": _pair("web", last_token="digest-old", last_token_expiry=grace_until),
        "ios": _pair("ios"),
    }

    repo.save(principal)

    assert principal.version == 2
    loaded = repo.load("alice@example.com")
    assert loaded.version == 2
    assert loaded.credentials["web"] == principal.credentials["web"]
    assert loaded.credentials["ios"].token_digest == "digest-ios"
    assert loaded.credentials["ios"].expiry == EXPIRY


def test_save_with_stale_version_conflicts(repo):
    repo.add(Principal(uid="alice@example.com"))
    first = repo.load("alice@example.com")
    second = repo.load("alice@example.com")

    first.credentials = {"web": _pair("web")}
    repo.save(first)

    second.credentials = {"ios": _pair("ios")}
    with pytest.raises(RepositoryConflictError):
        repo.save(second)
    assert second.version == 1
    assert list(repo.load("alice@example.com").credentials) == ["web"]


def test_save_missing_principal_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.save(Principal(uid="ghost@example.com", version=1))


def test_loaded_principals_are_detached(repo):
    repo.add(Principal(uid="alice@example.com"))
    loaded = repo.load("alice@example.com")

    loaded.credentials["web"] = _pair("web")

    assert repo.load("alice@example.com").credentials == {}


def test_delete(repo):
    repo.add(Principal(uid="alice@example.com"))

    assert repo.delete("Alice@example.com") is True
    assert repo.delete("alice@example.com") is False
    with pytest.raises(NotFoundError):
        repo.load("alice@example.com")
