from __future__ import annotations

import threading

import pytest

from src.signin_desk.signin_desk.core.exceptions import LockTimeoutError
from src.signin_desk.signin_desk.locking.base import hold
from src.signin_desk.signin_desk.locking.local_lock import LocalDocumentLock


def test_hold_times_out_while_another_thread_owns_the_lock():
    lock = LocalDocumentLock()
    ready = threading.Event()
    release = threading.Event()

    def owner():
        with hold(lock, 1):
            ready.set()
            release.wait(5)

    t = threading.Thread(target=owner)
    t.start()
    assert ready.wait(5)
    try:
        with pytest.raises(LockTimeoutError):
            with hold(lock, 0.05):
                pass
    finally:
        release.set()
        t.join(5)

    with hold(lock, 0.05):
        pass


def test_hold_is_reentrant_for_the_owning_thread():
    lock = LocalDocumentLock()

    with hold(lock, 0.05):
        with hold(lock, 0.05):
            pass

    assert lock.acquire(0)
    lock.release()
