from __future__ import annotations

import threading


class LocalDocumentLock:
    """In-process document lock for the memory backend and single-process deployments."""

    def __init__(self):
        self._lock = threading.RLock()

    def acquire(self, timeout: float) -> bool:
        if timeout <= 0:
            return self._lock.acquire(blocking=False)
        return self._lock.acquire(timeout=timeout)

    def release(self) -> None:
        self._lock.release()
