from __future__ import annotations

import importlib
import logging
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import build_container_from_settings
from .database.bootstrap import DEFAULT_FINANCE_KEY, seed_demo_data

from .attendance.controller import register as register_attendance
from .finance.controller import register as register_finance
from .requests.controller import register as register_requests
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    setup_logging(bool(getattr(settings, "DEBUG", False)), getattr(settings, "LOG_FILE", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    container = build_container_from_settings(settings)
    app.extensions["ops_portal"] = container
    logger.info("Starting ops portal (settings=%s, storage=%s)", settings_module, settings.STORAGE_BACKEND)

    if getattr(settings, "AUTO_SEED", False):
        seed_demo_data(container.store, finance_key=getattr(settings, "DEFAULT_FINANCE_KEY", DEFAULT_FINANCE_KEY))

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_schedules(app, container)
    register_requests(app, container)
    register_finance(app, container)

    return app
