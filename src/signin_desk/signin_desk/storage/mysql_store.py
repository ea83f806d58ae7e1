from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Mapping, Sequence

import mysql.connector

from ..common.text import norm_key
from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import LockTimeoutError, MissingTableError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, quote_identifier, to_cell
from .repository import StoredRow

HEADERS_TABLE = "tabular_headers"
ER_DUP_FIELDNAME = 1060


def _col(position: int) -> str:
    return f"`c{int(position)}`"


class MySQLTabularStore:
    """Tabular store backed by MySQL.

    Each logical table is a MySQL table with an AUTO_INCREMENT ``row_key`` followed by
    TEXT columns ``c0..cN``. Header labels live in ``tabular_headers`` so they can hold
    any text and be extended without renaming physical columns.

    Creating tables and appending columns run under a MySQL named lock, so concurrent
    requests on a fresh database see one consistent header.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._catalog_ready = False
        self._ddl_lock_name = f"signin_desk.ddl.{conn_factory.database}"[:64]

    @contextmanager
    def _ddl_guard(self, cur) -> Iterator[None]:
        cur.execute("SELECT GET_LOCK(%s, %s)", (self._ddl_lock_name, DEFAULT_LOCK_TIMEOUT_SECONDS))
        row = cur.fetchone()
        if not row or row[0] != 1:
            raise LockTimeoutError("The sign-in desk is busy right now. Please try again.")
        try:
            yield
        finally:
            cur.execute("SELECT RELEASE_LOCK(%s)", (self._ddl_lock_name,))
            cur.fetchone()

    def _ensure_catalog(self, cur) -> None:
        if self._catalog_ready:
            return
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {quote_identifier(HEADERS_TABLE)} (
                table_name VARCHAR(64) NOT NULL,
                position INT NOT NULL,
                label VARCHAR(255) NOT NULL,
                PRIMARY KEY (table_name, position)
            ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
            """
        )
        self._catalog_ready = True

    def _header(self, cur, name: str) -> list[str]:
        self._ensure_catalog(cur)
        cur.execute(
            f"SELECT label FROM {quote_identifier(HEADERS_TABLE)} WHERE table_name=%s ORDER BY position",
            (name,),
        )
        return [str(r[0]) for r in fetchall(cur)]

    def _require(self, cur, name: str) -> list[str]:
        header = self._header(cur, name)
        if not header and not self._exists(cur, name):
            raise MissingTableError(f"Table '{name}' does not exist.")
        return header

    @staticmethod
    def _exists(cur, name: str) -> bool:
        cur.execute(
            """
            SELECT COUNT(*) FROM information_schema.tables
            WHERE table_schema = DATABASE() AND table_name=%s
            """,
            (name,),
        )
        row = cur.fetchone()
        return bool(row and int(row[0]))

    @staticmethod
    def _to_row(raw: Sequence[Any], width: int) -> StoredRow:
        values = ["" if v is None else v for v in raw[1 : width + 1]]
        values += [""] * (width - len(values))
        return StoredRow(key=int(raw[0]), values=tuple(values))

    def has_table(self, name: str) -> bool:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            return self._exists(cur, name)

    def create_table(self, name: str, header: Sequence[str]) -> None:
        table = quote_identifier(name)
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            with self._ddl_guard(cur):
                self._ensure_catalog(cur)
                columns = ", ".join(f"{_col(i)} TEXT NULL" for i in range(len(header)))
                cur.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        row_key BIGINT NOT NULL AUTO_INCREMENT PRIMARY KEY{', ' + columns if columns else ''}
                    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
                    """
                )
                if self._header(cur, name):
                    return
                for i, label in enumerate(header):
                    cur.execute(
                        f"INSERT IGNORE INTO {quote_identifier(HEADERS_TABLE)}(table_name, position, label) VALUES(%s,%s,%s)",
                        (name, i, str(label)),
                    )

    def get_header(self, name: str) -> list[str]:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            return self._require(cur, name)

    def add_columns(self, name: str, labels: Sequence[str]) -> list[str]:
        table = quote_identifier(name)
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            with self._ddl_guard(cur):
                header = self._require(cur, name)
                existing = {norm_key(h) for h in header}
                for label in labels:
                    if norm_key(label) in existing:
                        continue
                    position = len(header)
                    try:
                        cur.execute(f"ALTER TABLE {table} ADD COLUMN {_col(position)} TEXT NULL")
                    except mysql.connector.Error as e:
                        # column left behind by an interrupted append
                        if e.errno != ER_DUP_FIELDNAME:
                            raise
                    cur.execute(
                        f"INSERT IGNORE INTO {quote_identifier(HEADERS_TABLE)}(table_name, position, label) VALUES(%s,%s,%s)",
                        (name, position, str(label)),
                    )
                    header.append(str(label))
                    existing.add(norm_key(label))
                return header

    def scan(self, name: str) -> list[StoredRow]:
        table = quote_identifier(name)
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            width = len(self._require(cur, name))
            cur.execute(f"SELECT * FROM {table} ORDER BY row_key")
            return [self._to_row(r, width) for r in fetchall(cur)]

    def get_rows(self, name: str, keys: Iterable[int]) -> dict[int, StoredRow]:
        wanted = sorted({int(k) for k in keys})
        if not wanted:
            return {}
        table = quote_identifier(name)
        placeholders = ",".join(["%s"] * len(wanted))
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            width = len(self._require(cur, name))
            cur.execute(f"SELECT * FROM {table} WHERE row_key IN ({placeholders})", tuple(wanted))
            rows = [self._to_row(r, width) for r in fetchall(cur)]
            return {r.key: r for r in rows}

    def append_rows(self, name: str, rows: Sequence[Sequence[Any]]) -> list[int]:
        if not rows:
            return []
        table = quote_identifier(name)
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            width = len(self._require(cur, name))
            columns = ", ".join(_col(i) for i in range(width))
            placeholders = ",".join(["%s"] * width)
            keys: list[int] = []
            for values in rows:
                padded = list(values)[:width] + [""] * (width - len(values))
                cur.execute(
                    f"INSERT INTO {table}({columns}) VALUES({placeholders})",
                    tuple(to_cell(v) for v in padded),
                )
                keys.append(int(cur.lastrowid))
            return keys

    def update_rows(self, name: str, updates: Mapping[int, Mapping[int, Any]]) -> list[int]:
        if not updates:
            return []
        table = quote_identifier(name)
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            width = len(self._require(cur, name))
            wanted = sorted({int(k) for k in updates})
            placeholders = ",".join(["%s"] * len(wanted))
            cur.execute(f"SELECT row_key FROM {table} WHERE row_key IN ({placeholders})", tuple(wanted))
            existing = {int(r[0]) for r in fetchall(cur)}

            applied: list[int] = []
            for key, changes in updates.items():
                key = int(key)
                if key not in existing:
                    continue
                cells = {int(i): v for i, v in changes.items() if int(i) < width}
                if cells:
                    assignments = ", ".join(f"{_col(i)}=%s" for i in cells)
                    cur.execute(
                        f"UPDATE {table} SET {assignments} WHERE row_key=%s",
                        tuple(to_cell(v) for v in cells.values()) + (key,),
                    )
                applied.append(key)
            return applied

    def delete_rows(self, name: str, keys: Iterable[int]) -> int:
        wanted = sorted({int(k) for k in keys})
        if not wanted:
            return 0
        table = quote_identifier(name)
        placeholders = ",".join(["%s"] * len(wanted))
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            self._require(cur, name)
            cur.execute(f"DELETE FROM {table} WHERE row_key IN ({placeholders})", tuple(wanted))
            return int(cur.rowcount or 0)
