from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import to_iso
from ..common.text import clean, to_optional_int


@dataclass(frozen=True)
class GroupContactSession:
    contact_id: str
    day: str
    group: str
    topic: str
    summary: str
    duration_minutes: Optional[int]
    created_at: Optional[datetime]
    edited_at: Optional[datetime]
    row_key: int

    def note(self) -> dict[str, Any]:
        return {"topic": self.topic, "summary": self.summary, "duration": self.duration_minutes}


@dataclass(frozen=True)
class GroupParticipant:
    contact_id: str
    student_id: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class GroupMentor:
    contact_id: str
    mentor_id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.mentor_id, "name": self.name}


@dataclass(frozen=True)
class IndividualNote:
    """The form fields of an individual contact note."""

    contact_with: str = ""
    type_of_contact: str = ""
    topic: str = ""
    success: str = ""
    notes: str = ""
    referrals: str = ""
    location: str = ""
    duration_minutes: Optional[int] = None
    mentor_id: str = ""

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "IndividualNote":
        p = payload or {}
        referrals = p.get("referrals")
        if isinstance(referrals, (list, tuple)):
            referrals = ", ".join(clean(r) for r in referrals if clean(r))
        return cls(
            contact_with=clean(p.get("contactWith")),
            type_of_contact=clean(p.get("typeOfContact")),
            topic=clean(p.get("topic")),
            success=clean(p.get("success")),
            notes=clean(p.get("notes")),
            referrals=clean(referrals),
            location=clean(p.get("location")),
            duration_minutes=to_optional_int(p.get("durationMinutes", p.get("duration"))),
            mentor_id=clean(p.get("mentorId")).upper(),
        )


@dataclass(frozen=True)
class IndividualContactSession:
    contact_id: str
    day: str
    note: IndividualNote
    created_at: Optional[datetime] = None
    edited_at: Optional[datetime] = None


@dataclass(frozen=True)
class IndividualParticipant:
    contact_id: str
    student_id: str
    notes_student: str = ""


@dataclass(frozen=True)
class UpsertOutcome:
    contact_id: str
    created: bool
    row_key: int


@dataclass(frozen=True)
class FullGroupNoteResult:
    contact_id: str
    created: bool
    participants_added: int
    mentors_added: int


@dataclass(frozen=True)
class IndividualSaveResult:
    contact_id: str
    participants_saved: int
    student_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GroupPrefill:
    contact_id: Optional[str]
    note: Optional[dict[str, Any]]
    mentors: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"contactId": self.contact_id, "note": self.note, "mentors": list(self.mentors)}


@dataclass(frozen=True)
class RecentContact:
    contact_id: str
    day: str
    display_name: str
    mentor_id: str
    mentor_name: str
    note: IndividualNote
    edited_at: Optional[datetime]

    def to_dict(self) -> dict[str, Any]:
        n = self.note
        return {
            "contactId": self.contact_id,
            "date": self.day,
            "displayName": self.display_name,
            "duration": n.duration_minutes,
            "contactWith": n.contact_with,
            "typeOfContact": n.type_of_contact,
            "topic": n.topic,
            "success": n.success,
            "notes": n.notes,
            "referrals": n.referrals,
            "location": n.location,
            "edited": to_iso(self.edited_at),
            "mentorId": self.mentor_id,
            "mentorName": self.mentor_name,
        }
