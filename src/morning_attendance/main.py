from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from .app_logger import setup_logging
from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import AppConfig, build_container

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    config = AppConfig.from_settings(settings)
    container = build_container(config)
    app.extensions["morning_attendance"] = container

    logger.info(
        "settings=%s data=%s remote=%s",
        settings_module,
        config.data_file,
        container.gateway.endpoint or "-",
    )

    register_attendance(app, container)
    return app
