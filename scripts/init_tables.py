from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.signin_desk.signin_desk.app_logger import setup_logging
from src.signin_desk.signin_desk.container import build_container
from src.signin_desk.signin_desk.database.bootstrap import ensure_database_exists, ensure_owned_tables, list_tables
from src.signin_desk.signin_desk.storage.tables import OWNED_TABLES


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    db_config = dict(settings.DB_CONFIG)

    ensure_database_exists(db_config)
    container = build_container(storage_backend="mysql", db_config=db_config)
    ensure_owned_tables(container.store, OWNED_TABLES)
    tables = list_tables(db_config)
    print(
        "OK: Owned tables ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
