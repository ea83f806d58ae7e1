from __future__ import annotations

from datetime import datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

from ..app_logger import get_logger
from ..common.datetime_utils import day_or_today
from ..common.text import clean, fold
from ..common.validators import require_non_empty
from ..core.enums import SessionType
from ..core.exceptions import NotFoundError, ValidationError
from ..locking.base import DocumentLock, hold
from .model import SignInSession
from .repository import SessionRepository

logger = get_logger("sessions")


def parse_session_type(value: Any) -> SessionType:
    text = fold(value)
    if not text:
        return SessionType.INDIVIDUAL
    try:
        return SessionType(text)
    except ValueError:
        raise ValidationError("Session type must be 'group' or 'individual'.")


def label_key(label: Any) -> str:
    return " ".join(fold(label).split())


class SignInSessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        lock: DocumentLock,
        *,
        tz: ZoneInfo,
        clock: Callable[[], datetime],
        lock_timeout: float,
    ):
        self._sessions = sessions
        self._lock = lock
        self._tz = tz
        self._clock = clock
        self._lock_timeout = lock_timeout

    def start(self, *, label: Any, day: Any, session_type: Any) -> SignInSession:
        """Open (or re-open) the session keyed by (date, label, type). Idempotent."""
        name = require_non_empty(label, "session label")
        kind = parse_session_type(session_type)
        with hold(self._lock, self._lock_timeout, operation="startSignInSession"):
            now = self._clock()
            ymd_day = day_or_today(day, self._tz, now)
            wanted = label_key(name)
            for s in self._sessions.list_all():
                if s.day == ymd_day and s.session_type == kind and label_key(s.label) == wanted:
                    if s.is_active:
                        return s
                    logger.info("Reactivating session %s (%s %s)", s.session_id, ymd_day, s.label)
                    return self._sessions.reactivate(s)
            created = self._sessions.create(label=name, day=ymd_day, session_type=kind, now=now)
            logger.info("Started %s session %s for %s on %s", kind.value, created.session_id, name, ymd_day)
            return created

    def end(self, session_id: Any) -> SignInSession:
        sid = require_non_empty(session_id, "session ID")
        with hold(self._lock, self._lock_timeout, operation="endSignInSession"):
            session = self.get(sid)
            if not session.is_active:
                return session
            closed = self._sessions.close(session, closed_at=self._clock())
        logger.info("Ended session %s (%s %s)", closed.session_id, closed.day, closed.label)
        return closed

    def list_active(self, day: Any = None) -> list[SignInSession]:
        ymd_day = day_or_today(day, self._tz, self._clock())
        items = [s for s in self._sessions.list_all() if s.is_active and s.day == ymd_day]
        items.sort(key=lambda s: (fold(s.label), s.session_id))
        return items

    def get(self, session_id: Any) -> SignInSession:
        session = self._sessions.get(clean(session_id))
        if session is None:
            raise NotFoundError("Session not found.")
        return session

    def get_active(self, session_id: Any) -> SignInSession:
        session = self._sessions.get(clean(session_id))
        if session is None or not session.is_active:
            raise NotFoundError("Session is not active or not found.")
        return session

    def record_sign_in(self, session_id: str, *, at: datetime) -> SignInSession:
        with hold(self._lock, self._lock_timeout, operation="recordSignIn"):
            return self._sessions.record_sign_in(session_id, at=at)
