from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SessionType
from .model import SignInSession


class SessionRepository(Protocol):
    def list_all(self) -> Sequence[SignInSession]:
        raise NotImplementedError

    def get(self, session_id: str) -> Optional[SignInSession]:
        raise NotImplementedError

    def create(self, *, label: str, day: str, session_type: SessionType, now: datetime) -> SignInSession:
        raise NotImplementedError

    def reactivate(self, session: SignInSession) -> SignInSession:
        raise NotImplementedError

    def close(self, session: SignInSession, *, closed_at: datetime) -> SignInSession:
        raise NotImplementedError

    def record_sign_in(self, session_id: str, *, at: datetime) -> SignInSession:
        """Increment SignInCount and stamp LastSignInAt from the current row."""

        raise NotImplementedError
