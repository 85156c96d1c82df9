from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .core.logging import setup_logging
from .registry.controller import register as register_registry

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s store=%s key=%s",
        settings_module,
        getattr(settings, "STORE_BACKEND", "file"),
        getattr(settings, "STORE_KEY", "-"),
    )

    if container is None:
        container = build_container(settings=settings)
    app.extensions["event_checkin"] = container

    register_registry(app, container)

    return app
