from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import to_iso
from ..common.text import fold
from ..core.enums import QueueStatus


def derive_status(*, processed_at: Any, contact_id: Any, raw_status: Any) -> QueueStatus:
    """Processed when stamped (or marked so), Claimed when linked to a contact or marked so, else Pending."""
    raw = fold(raw_status)
    if processed_at or raw == "processed":
        return QueueStatus.PROCESSED
    if contact_id or raw == "claimed":
        return QueueStatus.CLAIMED
    return QueueStatus.PENDING


@dataclass(frozen=True)
class QueueEntry:
    row_key: int
    timestamp: Optional[datetime]
    day: str
    person_id: str
    display_name: str
    school: str
    mentor_id: str
    mentor_name: str
    status: QueueStatus
    claimed_by: str
    claimed_at: Optional[datetime]
    processed_at: Optional[datetime]
    contact_id: str

    def to_dict(self, *, viewer: str = "") -> dict[str, Any]:
        return {
            "rowKey": self.row_key,
            "timestamp": to_iso(self.timestamp),
            "date": self.day,
            "id": self.person_id,
            "displayName": self.display_name,
            "name": self.display_name,
            "school": self.school,
            "mentorId": self.mentor_id,
            "mentorName": self.mentor_name,
            "mentor": self.mentor_name or self.mentor_id,
            "status": self.status.value,
            "claimedBy": self.claimed_by,
            "claimedAt": to_iso(self.claimed_at),
            "processedAt": to_iso(self.processed_at),
            "contactId": self.contact_id,
            "mine": bool(viewer) and self.claimed_by.lower() == viewer.lower(),
        }


@dataclass(frozen=True)
class QueueUpdate:
    """Partial row change. ``None`` leaves the cell untouched."""

    status: Optional[QueueStatus] = None
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    contact_id: Optional[str] = None


@dataclass(frozen=True)
class ClaimResult:
    applied: list[int]
    failed: list[int]


@dataclass(frozen=True)
class ProcessResult:
    rows: int
    contact_id: str
    applied: list[int]
    skipped: list[int]


@dataclass(frozen=True)
class MatchResult:
    matched: int
    rows: list[int]
