from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .logging_setup import setup_logging
from . import web
from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .events.controller import register as register_events

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            notifier_backend=getattr(settings, "NOTIFIER_BACKEND", "log"),
            redis_url=getattr(settings, "REDIS_URL", ""),
            default_trend_days=int(getattr(settings, "DEFAULT_TREND_DAYS", 7)),
            default_page_size=int(getattr(settings, "DEFAULT_PAGE_SIZE", 50)),
        )

    app.extensions["container"] = container

    web.register(app)
    register_attendance(app, container)
    register_analytics(app, container)
    register_events(app, container)

    return app
