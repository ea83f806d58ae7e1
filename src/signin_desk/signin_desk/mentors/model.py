from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Mentor:
    mentor_id: str
    first_name: str
    last_name: str
    active: bool = True

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip() or self.mentor_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.mentor_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.name,
            "active": self.active,
        }
