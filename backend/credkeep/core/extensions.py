"""Flask extension singletons: SQLAlchemy and the optional Redis client."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Constraint names stay stable across SQLite and server databases
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
REDIS_EXTENSION_KEY = "redis_client"


def _connect_redis(url: str, timeout: float) -> redis.Redis:
    """Open a client with bounded socket waits and check it answers."""
    client = redis.Redis.from_url(
        url, socket_timeout=timeout, socket_connect_timeout=timeout
    )
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """Bind SQLAlchemy and, when ``REDIS_URL`` is set, a Redis client.

    Parameters
    ----------
    app: flask.Flask
        Application receiving the extensions. The :mod:`credkeep.models`
        package is imported so the ``principals`` table is registered on
        the metadata before ``create_all``.
    """
    db.init_app(app)

    from credkeep import models as _models  # noqa: F401

    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        app.extensions[REDIS_EXTENSION_KEY] = _connect_redis(
            redis_url, float(app.config.get("REDIS_SOCKET_TIMEOUT", 2.0))
        )
    else:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)
