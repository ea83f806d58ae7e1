from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..roster.model import Person
from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    @property
    def table_name(self) -> str:
        raise NotImplementedError

    def append(self, *, person: Person, group: str, timestamp: datetime) -> AttendanceEntry:
        raise NotImplementedError

    def discard(self, row_key: int) -> bool:
        """Remove a row this process appended (used to undo a failed sign-in)."""

        raise NotImplementedError
