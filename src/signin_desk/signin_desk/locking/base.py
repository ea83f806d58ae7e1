from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol

from ..app_logger import get_logger
from ..core.exceptions import LockTimeoutError

logger = get_logger("locking")


class DocumentLock(Protocol):
    """Process-wide exclusive lock over the whole store. Re-entrant for the holding thread."""

    def acquire(self, timeout: float) -> bool:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


@contextmanager
def hold(lock: DocumentLock, timeout: float, *, operation: str = "") -> Iterator[None]:
    """Run a critical section under ``lock`` or raise LockTimeoutError before any write."""
    if not lock.acquire(timeout):
        logger.warning("Lock timeout after %ss (%s)", timeout, operation or "unnamed operation")
        raise LockTimeoutError("The sign-in desk is busy right now. Please try again.")
    try:
        yield
    finally:
        lock.release()
