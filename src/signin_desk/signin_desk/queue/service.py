from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping
from zoneinfo import ZoneInfo

from ..app_logger import get_logger
from ..common.datetime_utils import day_or_today
from ..common.text import append_unique_csv, clean, contiguous_runs, fold, id_key, to_optional_int, unique
from ..core.constants import UNKNOWN_CLAIMANT
from ..core.enums import QueueStatus
from ..core.exceptions import ValidationError
from ..locking.base import DocumentLock, hold
from .model import ClaimResult, MatchResult, ProcessResult, QueueEntry, QueueUpdate
from .repository import QueueRepository

logger = get_logger("queue")


def parse_row_keys(values: Any) -> list[int]:
    if values is None:
        values = []
    elif isinstance(values, (str, int)):
        values = [values]
    keys = unique(k for k in (to_optional_int(v) for v in values) if k is not None)
    if not keys:
        raise ValidationError("No rows provided.")
    return keys


def parse_queue_status(value: Any, default: QueueStatus = QueueStatus.CLAIMED) -> QueueStatus:
    text = fold(value)
    if not text:
        return default
    for status in QueueStatus:
        if status.value.lower() == text:
            return status
    raise ValidationError(f"Unknown queue status: {clean(value)}.")


class QueueService:
    def __init__(
        self,
        queue: QueueRepository,
        lock: DocumentLock,
        *,
        names_for_ids: Callable[[Iterable[str]], Mapping[str, str]],
        tz: ZoneInfo,
        clock: Callable[[], datetime],
        lock_timeout: float,
    ):
        self._queue = queue
        self._lock = lock
        self._names_for_ids = names_for_ids
        self._tz = tz
        self._clock = clock
        self._lock_timeout = lock_timeout

    @property
    def table_name(self) -> str:
        return self._queue.table_name

    def _apply_in_runs(self, updates: Mapping[int, QueueUpdate]) -> list[int]:
        applied: list[int] = []
        for run in contiguous_runs(updates):
            applied.extend(self._queue.apply_updates({k: updates[k] for k in run}))
        return applied

    def list_queue(self, day: Any = None) -> list[QueueEntry]:
        """Entries signed in on ``day`` (calendar day in the program time zone)."""
        ymd_day = day_or_today(day, self._tz, self._clock())
        items = [e for e in self._queue.list_entries() if e.person_id and e.day == ymd_day]

        missing = [e.person_id for e in items if not e.display_name]
        names = self._names_for_ids(missing) if missing else {}
        return [
            e if e.display_name else replace(e, display_name=names.get(e.person_id) or e.person_id)
            for e in items
        ]

    def enqueue(self, *, person_id: str, display_name: str, school: str, group: str, at: datetime) -> int:
        return self._queue.append(
            person_id=person_id,
            display_name=display_name,
            school=school,
            group=group,
            timestamp=at,
        )

    def discard(self, row_key: int) -> bool:
        return self._queue.discard(row_key)

    def claim(self, row_keys: Any, claimant: Any) -> ClaimResult:
        keys = parse_row_keys(row_keys)
        who = clean(claimant) or UNKNOWN_CLAIMANT
        with hold(self._lock, self._lock_timeout, operation="claimRows"):
            now = self._clock()
            current = self._queue.get_many(keys)
            claimable = [k for k in keys if k in current and current[k].status != QueueStatus.PROCESSED]
            applied = self._apply_in_runs(
                {k: QueueUpdate(status=QueueStatus.CLAIMED, claimed_by=who, claimed_at=now) for k in claimable}
            )
        failed = [k for k in keys if k not in applied]
        if failed:
            logger.info("Claim by %s skipped rows %s", who, failed)
        return ClaimResult(applied=sorted(applied), failed=failed)

    def mark_processed(self, row_keys: Any, contact_id: Any) -> ProcessResult:
        """Stamp rows Processed regardless of their current status. Unknown rows are skipped."""
        keys = parse_row_keys(row_keys)
        cid = clean(contact_id)
        with hold(self._lock, self._lock_timeout, operation="markProcessed"):
            now = self._clock()
            applied = self._apply_in_runs(
                {
                    k: QueueUpdate(status=QueueStatus.PROCESSED, processed_at=now, contact_id=cid or None)
                    for k in keys
                }
            )
        skipped = [k for k in keys if k not in applied]
        return ProcessResult(rows=len(applied), contact_id=cid, applied=sorted(applied), skipped=skipped)

    def mark_processed_by_ids(self, day: Any, ids: Any, contact_id: Any, status: Any = None) -> MatchResult:
        if isinstance(ids, (str, int)):
            ids = [ids]
        wanted = {id_key(x) for x in (ids or []) if clean(x)}
        if not wanted:
            raise ValidationError("No IDs provided.")
        new_status = parse_queue_status(status)
        cid = clean(contact_id)

        with hold(self._lock, self._lock_timeout, operation="markProcessedByIds"):
            now = self._clock()
            ymd_day = day_or_today(day, self._tz, now)
            matched = [
                e for e in self._queue.list_entries() if e.day == ymd_day and id_key(e.person_id) in wanted
            ]
            updates: dict[int, QueueUpdate] = {}
            for e in matched:
                keep_processed = e.status == QueueStatus.PROCESSED and new_status != QueueStatus.PROCESSED
                updates[e.row_key] = QueueUpdate(
                    status=None if keep_processed else new_status,
                    contact_id=append_unique_csv(e.contact_id, cid) if cid else None,
                    processed_at=now if (cid or new_status == QueueStatus.PROCESSED) else None,
                )
            applied = self._apply_in_runs(updates)
        return MatchResult(matched=len(matched), rows=sorted(applied))
