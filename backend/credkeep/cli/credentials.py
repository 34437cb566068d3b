"""Flask CLI commands for credential maintenance."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from credkeep.core.extensions import db
from credkeep.services._shared.errors import NotFoundError

LOGGER = logging.getLogger(__name__)


def _load(uid: str):
    from credkeep.api import STORE_KEY

    store = current_app.extensions[STORE_KEY]
    try:
        return store, store.repository.load(uid)
    except NotFoundError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group("credentials")
@click.option("--verbose", is_flag=True, help="Enable debug logging for the credential store.")
def credentials_cli(verbose: bool) -> None:
    """Inspect and maintain principal credentials."""
    if verbose:
        logging.getLogger("credkeep.services.credentials").setLevel(logging.DEBUG)


@credentials_cli.command("init-db")
@with_appcontext
def init_db() -> None:
    """Create the ``principals`` table when missing."""
    db.create_all()
    click.echo("Database schema ready.")


@credentials_cli.command("clients")
@click.argument("uid")
@with_appcontext
def list_clients(uid: str) -> None:
    """List the client ids currently holding a credential for UID."""
    store, principal = _load(uid)
    clients = store.active_clients(principal)
    if not clients:
        click.echo("  (no clients)")
        return
    for client_id in clients:
        pair = principal.credentials[client_id]
        click.echo(f"  {client_id}  expires={pair.expiry.isoformat()}")


@credentials_cli.command("sweep")
@click.argument("uid")
@with_appcontext
def sweep(uid: str) -> None:
    """Drop expired credential pairs of UID."""
    store, principal = _load(uid)
    removed = store.sweep_expired(principal)
    LOGGER.info("credential.sweep", extra={"uid": principal.uid})
    click.echo(f"Removed {removed} expired credential(s).")


@credentials_cli.command("revoke-all")
@click.argument("uid")
@click.confirmation_option(prompt="Sign UID out of every client?")
@with_appcontext
def revoke_all(uid: str) -> None:
    """Revoke every credential pair of UID."""
    store, principal = _load(uid)
    removed = store.revoke_all(principal)
    click.echo(f"Revoked {removed} credential(s).")
