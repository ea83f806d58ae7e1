from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping, Protocol, Sequence

from .model import QueueEntry, QueueUpdate


class QueueRepository(Protocol):
    @property
    def table_name(self) -> str:
        raise NotImplementedError

    def list_entries(self) -> Sequence[QueueEntry]:
        raise NotImplementedError

    def get_many(self, row_keys: Iterable[int]) -> dict[int, QueueEntry]:
        raise NotImplementedError

    def append(
        self,
        *,
        person_id: str,
        display_name: str,
        school: str,
        group: str,
        timestamp: datetime,
    ) -> int:
        """Append a Pending entry; returns its row key."""

        raise NotImplementedError

    def apply_updates(self, updates: Mapping[int, QueueUpdate]) -> list[int]:
        """Write changes to existing rows. Keys that no longer exist are skipped."""

        raise NotImplementedError

    def discard(self, row_key: int) -> bool:
        raise NotImplementedError
