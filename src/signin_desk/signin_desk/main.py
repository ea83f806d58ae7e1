from __future__ import annotations

import importlib

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .app_logger import get_logger, setup_logging
from .container import build_container
from .database.bootstrap import ensure_database_exists, ensure_owned_tables
from .desk.controller import register as register_desk
from .storage.tables import OWNED_TABLES


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    logger = get_logger()

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    storage_backend = str(getattr(settings, "STORAGE_BACKEND", "memory")).lower()
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s storage=%s", settings_module, storage_backend)
    if storage_backend == "mysql":
        logger.info(
            "db=%s@%s:%s/%s",
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_CREATE_DATABASE", False)):
            ensure_database_exists(db_config)

    container = build_container(
        storage_backend=storage_backend,
        db_config=db_config,
        lock_backend=getattr(settings, "LOCK_BACKEND", None),
        lock_timeout=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 30)),
        timezone=getattr(settings, "TIMEZONE", "America/Chicago"),
        attendance_table=getattr(settings, "ATTENDANCE_TABLE", "attendance"),
        roster_tables=tuple(getattr(settings, "ROSTER_TABLES", ())),
        mentors_table=getattr(settings, "MENTORS_TABLE", "mentors"),
        cache_ttls=getattr(settings, "CACHE_TTLS", None),
    )

    if bool(getattr(settings, "AUTO_INIT_TABLES", False)):
        ensure_owned_tables(container.store, OWNED_TABLES)

    register_desk(app, container)
    app.extensions["signin_desk"] = container
    return app
