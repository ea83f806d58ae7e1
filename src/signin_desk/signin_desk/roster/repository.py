from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional, Protocol, Sequence

from .model import KnownStudent, Person, SourceRecord, UpsertResult


class KnownStudentRepository(Protocol):
    def list_all(self) -> Sequence[KnownStudent]:
        raise NotImplementedError

    def find(self, person_id: str) -> Optional[KnownStudent]:
        raise NotImplementedError

    def upsert(self, person: Person, *, now: datetime, sign_in_at: Optional[datetime] = None) -> UpsertResult:
        """Insert, or overwrite only the non-empty fields of ``person``."""

        raise NotImplementedError

    def insert_many(self, students: Sequence[KnownStudent], *, now: datetime) -> int:
        raise NotImplementedError


class PersonSource(Protocol):
    """A table people can be harvested from for the merged directory."""

    name: str
    priority: int

    def records(self) -> Iterator[SourceRecord]:
        raise NotImplementedError
