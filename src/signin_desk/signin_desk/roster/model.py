from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class Person:
    person_id: str
    first_name: str = ""
    last_name: str = ""
    school: str = ""
    grade: str = ""
    email: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.person_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "school": self.school,
            "grade": self.grade,
            "email": self.email,
        }


@dataclass(frozen=True)
class KnownStudent(Person):
    created_at: Optional[datetime] = None
    last_sign_in: Optional[datetime] = None
    row_key: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["createdAt"] = to_iso(self.created_at)
        data["lastSignIn"] = to_iso(self.last_sign_in)
        return data


@dataclass(frozen=True)
class SourceRecord:
    """One person as seen by one source table."""

    source: str
    priority: int
    person_id: str
    first_name: str = ""
    last_name: str = ""
    school: str = ""
    grade: str = ""
    email: str = ""
    seen_at: Optional[datetime] = None


@dataclass(frozen=True)
class UpsertResult:
    created: bool
    row_key: int


@dataclass(frozen=True)
class Suggestion:
    person: Person
    source: str
    score: int

    @property
    def label(self) -> str:
        p = self.person
        head = p.full_name or p.person_id
        if p.full_name and p.person_id:
            head = f"{p.full_name} · {p.person_id}"
        extras = " • ".join(x for x in (p.school, p.grade) if x)
        return f"{head} ({extras})" if extras else head

    def to_dict(self) -> dict[str, Any]:
        data = self.person.to_dict()
        data["source"] = self.source
        data["label"] = self.label
        return data


@dataclass(frozen=True)
class BootstrapSummary:
    added: int
    skipped_existing: int
    sources: dict[str, int]
    total_known: int
    collected: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "added": self.added,
            "skippedExisting": self.skipped_existing,
            "sources": dict(self.sources),
            "totalKnown": self.total_known,
            "collected": self.collected,
        }
