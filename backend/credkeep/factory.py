"""Application factory wiring Flask extensions and the credential core."""

from __future__ import annotations

from flask import Flask

from credkeep.core.config import BaseConfig, get_config
from credkeep.core.logger import configure_logging, init_app as init_logging
from credkeep.services._shared.ports import PrincipalRepository


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    repository: PrincipalRepository | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object, class or import path; ``APP_ENV`` decides
        when omitted.
    :param repository: Principal repository to use instead of the one derived
        from ``REDIS_URL``/``DATABASE_URL``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from credkeep.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from credkeep.api import init_app as init_api

    init_api(app, repository=repository)

    from credkeep.core import errors

    errors.init_app(app)

    from credkeep import cli as app_cli

    app_cli.init_app(app)

    return app
