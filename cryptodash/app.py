# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import atexit
import os
import sys
from datetime import timedelta

from flask import Flask
from flask_cors import CORS

from cryptodash.infrastructure.container import Container
from cryptodash.infrastructure.db import SchemaBootstrapError
from cryptodash.shared.config import AppConfig, load_config
from cryptodash.shared.logging import logger, setup_logging
from cryptodash.shared.middleware.error_handler import configure_error_handling
from cryptodash.shared.middleware.request_logger import configure_request_logging


def create_app(config: AppConfig | None = None, container: Container | None = None) -> Flask:
    """Build the Flask application.

    Without a ``container`` one is built from ``config`` and opened, and closed
    at interpreter exit. The schema is never created here; see ``main``.
    """
    if container is None:
        config = config or load_config()
        container = Container(config).open()
        atexit.register(container.close)
    config = config or container.config

    app = Flask(__name__)
    app.extensions["cryptodash.container"] = container

    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_NAME=config.session.cookie_name,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=config.session.cookie_secure,
        SESSION_COOKIE_SAMESITE=config.session.cookie_samesite,
        PERMANENT_SESSION_LIFETIME=timedelta(days=config.session.remember_days),
        RATE_LIMIT_ENABLED=config.security.enable_rate_limit,
        RATE_LIMIT_REQUESTS=config.security.rate_limit_requests,
        RATE_LIMIT_WINDOW=config.security.rate_limit_window,
    )

    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    app.register_blueprint(container.oauth_controller.as_blueprint())
    app.register_blueprint(container.dashboard_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")

        resp.headers.setdefault("Referrer-Policy", "no-referrer")

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")

        resp.headers.setdefault("X-Permitted-Cross-Domain-Policies", "none")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )

        return resp

    logger.info("Flask app initialized")
    return app


def main() -> None:
    config = load_config()
    setup_logging(debug_mode=config.debug_logging)

    container = Container(config).open()
    try:
        container.database.ensure_schema()
    except SchemaBootstrapError as exc:
        logger.opt(exception=exc).critical("Startup aborted: database schema unavailable")
        container.close()
        sys.exit(1)

    app = create_app(config, container)
    try:
        app.run(
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "5000")),
            debug=False,
        )
    finally:
        container.close()


if __name__ == "__main__":
    main()
