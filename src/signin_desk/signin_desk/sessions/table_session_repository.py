from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import parse_loose_datetime, ymd
from ..common.text import clean, fold, to_bool, to_int
from ..core.enums import SessionType
from ..core.exceptions import NotFoundError
from ..storage.repository import TabularStore
from ..storage.table import RowView, Table, ensure_table
from ..storage.tables import SIGN_IN_SESSIONS
from .model import SignInSession
from .repository import SessionRepository


def stored_session_type(value) -> SessionType:
    return SessionType.GROUP if fold(value) == SessionType.GROUP.value else SessionType.INDIVIDUAL


class TableSessionRepository(SessionRepository):
    def __init__(self, store: TabularStore, *, tz: ZoneInfo):
        self._store = store
        self._tz = tz

    def _table(self) -> Table:
        return ensure_table(self._store, SIGN_IN_SESSIONS)

    def _to_session(self, row: RowView) -> SignInSession:
        return SignInSession(
            session_id=row.text("session_id"),
            label=row.text("label"),
            session_type=stored_session_type(row.get("type")),
            day=ymd(row.get("date"), self._tz),
            is_active=to_bool(row.get("is_active"), default=True),
            created_at=parse_loose_datetime(row.get("created_at")),
            closed_at=parse_loose_datetime(row.get("closed_at")),
            last_sign_in_at=parse_loose_datetime(row.get("last_sign_in_at")),
            sign_in_count=to_int(row.get("sign_in_count"), 0),
            row_key=row.key,
        )

    def list_all(self) -> Sequence[SignInSession]:
        return [self._to_session(r) for r in self._table().rows() if r.text("session_id")]

    def get(self, session_id: str) -> Optional[SignInSession]:
        wanted = clean(session_id)
        for s in self.list_all():
            if s.session_id == wanted:
                return s
        return None

    def create(self, *, label: str, day: str, session_type: SessionType, now: datetime) -> SignInSession:
        session_id = str(uuid.uuid4())
        row_key = self._table().append(
            {
                "session_id": session_id,
                "label": label,
                "type": session_type.value,
                "date": day,
                "is_active": True,
                "created_at": now,
                "closed_at": "",
                "last_sign_in_at": "",
                "sign_in_count": 0,
            }
        )
        return SignInSession(
            session_id=session_id,
            label=label,
            session_type=session_type,
            day=day,
            is_active=True,
            created_at=now,
            closed_at=None,
            last_sign_in_at=None,
            sign_in_count=0,
            row_key=row_key,
        )

    def reactivate(self, session: SignInSession) -> SignInSession:
        if not self._table().update(session.row_key, {"is_active": True, "closed_at": ""}):
            raise NotFoundError("Session not found.")
        return replace(session, is_active=True, closed_at=None)

    def close(self, session: SignInSession, *, closed_at: datetime) -> SignInSession:
        if not self._table().update(session.row_key, {"is_active": False, "closed_at": closed_at}):
            raise NotFoundError("Session not found.")
        return replace(session, is_active=False, closed_at=closed_at)

    def record_sign_in(self, session_id: str, *, at: datetime) -> SignInSession:
        current = self.get(session_id)
        if current is None:
            raise NotFoundError("Session not found.")
        count = current.sign_in_count + 1
        if not self._table().update(current.row_key, {"last_sign_in_at": at, "sign_in_count": count}):
            raise NotFoundError("Session not found.")
        return replace(current, last_sign_in_at=at, sign_in_count=count)
