"""Flask CLI commands of the ``credentials`` group."""

from __future__ import annotations

import pytest
from credkeep.api import STORE_KEY
from credkeep.services._shared.dto import Principal


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def seeded(app):
    """Principal with two clients, one of them already expired."""
    from dataclasses import replace
    from datetime import timedelta

    store = app.extensions[STORE_KEY]
    principal = store.repository.add(Principal(uid="frank@example.com"))
    store.issue(principal, "web")
    store.issue(principal, "old")
    stale = principal.credentials["old"]
    principal.credentials["old"] = replace(stale, expiry=stale.expiry - timedelta(days=30))
    store.repository.save(principal)
    return principal


def test_init_db(runner):
    result = runner.invoke(args=["credentials", "init-db"])

    assert result.exit_code == 0
    assert "Database schema ready." in result.output


def test_clients_lists_active_clients(runner, seeded):
    result = runner.invoke(args=["credentials", "clients", "frank@example.com"])

    assert result.exit_code == 0
    assert "web" in result.output
    assert "old" not in result.output


def test_sweep_removes_expired_pairs(app, runner, seeded):
    result = runner.invoke(args=["credentials", "sweep", "frank@example.com"])

    assert result.exit_code == 0
    assert "Removed 1 expired credential(s)." in result.output
    stored = app.extensions[STORE_KEY].repository.load("frank@example.com")
    assert list(stored.credentials) == ["web"]


def test_revoke_all_requires_confirmation_flag(app, runner, seeded):
    result = runner.invoke(args=["credentials", "revoke-all", "frank@example.com", "--yes"])

    assert result.exit_code == 0
    assert "Revoked 2 credential(s)." in result.output
    assert app.extensions[STORE_KEY].repository.load("frank@example.com").credentials == {}


def test_unknown_uid_fails(runner):
    result = runner.invoke(args=["credentials", "sweep", "ghost@example.com"])

    assert result.exit_code != 0
    assert "not found" in result.output
