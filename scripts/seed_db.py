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
from src.signin_desk.signin_desk.database.bootstrap import seed_external_tables
from src.signin_desk.signin_desk.storage.tables import attendance_schema, mentors_schema, roster_schema


def main() -> None:
    """Create empty attendance/roster/mentors tables for a fresh local database."""
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    db_config = dict(settings.DB_CONFIG)

    container = build_container(storage_backend="mysql", db_config=db_config)
    schemas = [
        attendance_schema(getattr(settings, "ATTENDANCE_TABLE", "attendance")),
        mentors_schema(getattr(settings, "MENTORS_TABLE", "mentors")),
        *(roster_schema(name) for name in getattr(settings, "ROSTER_TABLES", [])),
    ]
    created = seed_external_tables(container.store, schemas)
    print(f"OK: Seeded external tables -> {', '.join(created) or '(none, all present)'}")


if __name__ == "__main__":
    main()
