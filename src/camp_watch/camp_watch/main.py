from __future__ import annotations

import importlib
import logging
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.exceptions import StoreError
from .core.logging_config import setup_logging
from .database.bootstrap import apply_schema
from .roster.controller import register as register_roster

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = dict(getattr(settings, "DB_CONFIG"))
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)

    tz_name = str(getattr(settings, "LOCAL_TIMEZONE", "") or "")
    tz = ZoneInfo(tz_name) if tz_name else None

    container = build_container(db_config=db_config, tz=tz)
    logger.info("settings=%s db=%s", settings_module, container.conn.config.describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(container.conn)

    try:
        container.roster_service.reload()
    except StoreError:
        # Start with empty projections; POST /api/reload can be retried once the store is back.
        logger.error("Initial reload failed", exc_info=True)

    app.extensions["camp_watch"] = container
    register_roster(app, container)

    return app
