# rentcore_backend/__init__.py
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .errors import register_error_handlers
from .extensions import db, jwt, mail


# --- Config ------------------------------------------------------------------
def _get_allowed_origins(app: Flask) -> list[str]:
    """Allowed CORS origins: local dev servers plus CORS_ALLOWED_ORIGINS."""
    default = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    extra = app.config.get("CORS_ALLOWED_ORIGINS") or ""
    extra_list = [o.strip() for o in extra.split(",") if o.strip()]
    return sorted(set(default + extra_list))


def _load_config(app: Flask, config_object: Optional[str | Any]) -> None:
    """
    `config_object` may be:
      - a config class
      - dotted path to a config class (e.g., "rentcore_backend.config.ProductionConfig")
      - None (then CONFIG_CLASS env or rentcore_backend.config.Config)
    """
    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS", "rentcore_backend.config.Config")
    app.config.from_object(config_object)

    if app.config.get("FLASK_ENV") == "production" and app.config.get("SECRET_KEY") == "change-me-in-prod":
        app.logger.warning("SECRET_KEY is not set; using the development default")


def _configure_logging(app: Flask) -> None:
    """JSON logs to stdout."""
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","name":"%(name)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    CORS(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins(app)}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )


def _configure_proxy(app: Flask) -> None:
    """Respect X-Forwarded-* from the hosting proxy."""
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    jwt.init_app(app)
    mail.init_app(app)

    from .services.notifications import build_notifier
    app.extensions["rentcore_notifier"] = build_notifier(app.config)


def _register_blueprints(app: Flask) -> None:
    from .routes import admin_bp, auth_bp, collector_bp, health_bp

    for bp in (health_bp, auth_bp, collector_bp, admin_bp):
        app.register_blueprint(bp)
        app.logger.debug("Registered blueprint %s", bp.name)


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    _load_config(app, config_object)
    _configure_logging(app)
    _configure_proxy(app)
    _configure_cors(app)

    _init_extensions(app)
    _register_blueprints(app)
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    return app
