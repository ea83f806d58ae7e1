from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import mysql.connector

from ..app_logger import get_logger
from ..storage.repository import TabularStore
from ..storage.schema import TableSchema
from ..storage.table import ensure_table

logger = get_logger("bootstrap")


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "signin_desk")),
    )


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = _as_target(db_config)
    conn = mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        database=target.database,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def ensure_owned_tables(store: TabularStore, schemas: Iterable[TableSchema]) -> list[str]:
    """Create owned tables and append any missing columns. Idempotent."""
    names: list[str] = []
    for schema in schemas:
        ensure_table(store, schema)
        names.append(schema.name)
    logger.info("Owned tables ready: %s", ", ".join(names))
    return names


def seed_external_tables(store: TabularStore, schemas: Iterable[TableSchema]) -> list[str]:
    """Create empty externally managed tables (attendance, roster, mentors) for local setups."""
    created: list[str] = []
    for schema in schemas:
        if store.has_table(schema.name):
            continue
        store.create_table(schema.name, schema.default_header)
        created.append(schema.name)
    if created:
        logger.info("Seeded empty external tables: %s", ", ".join(created))
    return created
