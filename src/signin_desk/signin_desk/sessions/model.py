from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import to_iso
from ..core.enums import SessionType


@dataclass(frozen=True)
class SignInSession:
    session_id: str
    label: str
    session_type: SessionType
    day: str
    is_active: bool
    created_at: Optional[datetime]
    closed_at: Optional[datetime]
    last_sign_in_at: Optional[datetime]
    sign_in_count: int
    row_key: int

    @property
    def is_group(self) -> bool:
        return self.session_type == SessionType.GROUP

    def summary(self) -> dict[str, Any]:
        return {"id": self.session_id, "label": self.label, "date": self.day, "type": self.session_type.value}

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.summary(),
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
            "closedAt": to_iso(self.closed_at),
            "lastSignInAt": to_iso(self.last_sign_in_at),
            "signInCount": self.sign_in_count,
        }
