from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import parse_loose_datetime, ymd
from ..common.text import looks_like_person_name
from ..core.enums import QueueStatus
from ..storage.repository import TabularStore
from ..storage.table import RowView, Table, ensure_table
from ..storage.tables import SIGN_IN_LOG
from .model import QueueEntry, QueueUpdate, derive_status
from .repository import QueueRepository


class TableQueueRepository(QueueRepository):
    def __init__(self, store: TabularStore, *, tz: ZoneInfo):
        self._store = store
        self._tz = tz

    @property
    def table_name(self) -> str:
        return SIGN_IN_LOG.name

    def _table(self) -> Table:
        return ensure_table(self._store, SIGN_IN_LOG)

    def _to_entry(self, row: RowView) -> QueueEntry:
        mentor_raw = row.text("mentor")
        is_name = looks_like_person_name(mentor_raw)
        timestamp = parse_loose_datetime(row.get("timestamp"))
        processed_at = parse_loose_datetime(row.get("processed_at"))
        contact_id = row.text("contact_id")
        return QueueEntry(
            row_key=row.key,
            timestamp=timestamp,
            day=ymd(timestamp, self._tz),
            person_id=row.text("person_id"),
            display_name=row.text("display_name"),
            school=row.text("school"),
            mentor_id="" if is_name else mentor_raw.upper(),
            mentor_name=mentor_raw if is_name else "",
            status=derive_status(
                processed_at=processed_at or row.text("processed_at"),
                contact_id=contact_id,
                raw_status=row.get("status"),
            ),
            claimed_by=row.text("claimed_by"),
            claimed_at=parse_loose_datetime(row.get("claimed_at")),
            processed_at=processed_at,
            contact_id=contact_id,
        )

    def list_entries(self) -> Sequence[QueueEntry]:
        return [self._to_entry(r) for r in self._table().rows()]

    def get_many(self, row_keys: Iterable[int]) -> dict[int, QueueEntry]:
        return {k: self._to_entry(r) for k, r in self._table().get_many(row_keys).items()}

    def append(
        self,
        *,
        person_id: str,
        display_name: str,
        school: str,
        group: str,
        timestamp: datetime,
    ) -> int:
        return self._table().append(
            {
                "timestamp": timestamp,
                "person_id": person_id,
                "display_name": display_name,
                "school": school,
                "status": QueueStatus.PENDING.value,
                "group": group,
            }
        )

    def apply_updates(self, updates: Mapping[int, QueueUpdate]) -> list[int]:
        changes: dict[int, dict[str, Any]] = {}
        for row_key, u in updates.items():
            cells: dict[str, Any] = {}
            if u.status is not None:
                cells["status"] = u.status.value
            if u.claimed_by is not None:
                cells["claimed_by"] = u.claimed_by
            if u.claimed_at is not None:
                cells["claimed_at"] = u.claimed_at
            if u.processed_at is not None:
                cells["processed_at"] = u.processed_at
            if u.contact_id is not None:
                cells["contact_id"] = u.contact_id
            changes[int(row_key)] = cells
        return self._table().update_many(changes)

    def discard(self, row_key: int) -> bool:
        return self._table().delete([row_key]) > 0
