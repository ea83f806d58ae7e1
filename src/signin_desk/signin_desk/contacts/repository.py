from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import (
    GroupContactSession,
    GroupMentor,
    GroupParticipant,
    IndividualContactSession,
    IndividualParticipant,
)


class GroupContactRepository(Protocol):
    def list_sessions(self) -> Sequence[GroupContactSession]:
        raise NotImplementedError

    def get_session(self, row_key: int) -> Optional[GroupContactSession]:
        raise NotImplementedError

    def insert_session(
        self,
        *,
        contact_id: str,
        day: str,
        group: str,
        topic: str,
        summary: str,
        duration_minutes: Optional[int],
        now: datetime,
    ) -> int:
        raise NotImplementedError

    def update_session(
        self,
        row_key: int,
        *,
        topic: str,
        summary: str,
        duration_minutes: Optional[int],
        now: datetime,
        contact_id: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def list_mentors(self) -> Sequence[GroupMentor]:
        raise NotImplementedError

    def list_participants(self, contact_id: str) -> Sequence[GroupParticipant]:
        raise NotImplementedError

    def replace_participants(self, contact_id: str, participants: Sequence[GroupParticipant], *, now: datetime) -> int:
        """Delete every participant row for ``contact_id`` and write ``participants``."""

        raise NotImplementedError

    def replace_mentors(self, contact_id: str, mentors: Sequence[GroupMentor], *, now: datetime) -> int:
        raise NotImplementedError


class IndividualContactRepository(Protocol):
    def insert_session(self, session: IndividualContactSession, participants: Sequence[IndividualParticipant]) -> None:
        raise NotImplementedError

    def list_sessions(self) -> Sequence[IndividualContactSession]:
        raise NotImplementedError

    def list_participants(self) -> Sequence[IndividualParticipant]:
        raise NotImplementedError
