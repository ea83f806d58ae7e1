from __future__ import annotations

import re
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConfigurationError
from .connection import DatabaseConnection

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]{1,64}$")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def quote_identifier(name: str) -> str:
    """Backtick-quote a table name after checking it is a plain identifier."""
    if not _IDENTIFIER_RE.match(name or ""):
        raise ConfigurationError(f"Invalid table name: {name!r}")
    return f"`{name}`"


def to_cell(value: Any) -> Optional[str]:
    """Serialize a value for a TEXT cell."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
