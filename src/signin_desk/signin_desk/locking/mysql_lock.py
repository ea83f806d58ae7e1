from __future__ import annotations

import math
import threading
import time
from typing import Any, Optional

from ..database.connection import DatabaseConnection


class MySQLDocumentLock:
    """Cross-process document lock built on MySQL ``GET_LOCK``.

    The named lock belongs to a connection, so one connection is kept open while the
    lock is held. A thread-level RLock makes nested acquisition from the same thread
    cheap and keeps other threads of this process queued locally.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, name: Optional[str] = None):
        self._conn_factory = conn_factory
        self._name = name or f"{conn_factory.database}.signin_desk"
        self._guard = threading.RLock()
        self._depth = 0
        self._conn: Any = None

    def acquire(self, timeout: float) -> bool:
        deadline = time.monotonic() + max(0.0, timeout)
        acquired = self._guard.acquire(timeout=timeout) if timeout > 0 else self._guard.acquire(blocking=False)
        if not acquired:
            return False
        if self._depth:
            self._depth += 1
            return True

        try:
            conn = self._conn_factory.connect()
            try:
                cur = conn.cursor()
                remaining = max(0, math.ceil(deadline - time.monotonic()))
                cur.execute("SELECT GET_LOCK(%s, %s)", (self._name, remaining))
                row = cur.fetchone()
                cur.close()
            except Exception:
                conn.close()
                raise
        except Exception:
            self._guard.release()
            raise

        if not row or row[0] != 1:
            conn.close()
            self._guard.release()
            return False

        self._conn = conn
        self._depth = 1
        return True

    def release(self) -> None:
        self._depth -= 1
        try:
            if self._depth == 0 and self._conn is not None:
                conn, self._conn = self._conn, None
                try:
                    cur = conn.cursor()
                    cur.execute("SELECT RELEASE_LOCK(%s)", (self._name,))
                    cur.fetchone()
                    cur.close()
                finally:
                    conn.close()
        finally:
            self._guard.release()
