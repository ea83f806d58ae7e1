from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ..app_logger import get_logger
from ..cache import keys as cache_keys
from ..cache.service import CacheService
from ..common.datetime_utils import day_or_today, require_day
from ..common.text import clean, id_key, split_rest_last, to_optional_int, unique
from ..common.validators import clamp_limit, require_non_empty
from ..core.constants import (
    DEFAULT_RECENT_PER_ID,
    GROUP_PREFILL_TTL_SECONDS,
    GROUP_ROW_HINT_TTL_SECONDS,
    MAX_RECENT_PER_ID,
    RECENT_CONTACTS_TTL_SECONDS,
)
from ..core.exceptions import ValidationError
from ..locking.base import DocumentLock, hold
from .model import (
    FullGroupNoteResult,
    GroupContactSession,
    GroupMentor,
    GroupParticipant,
    GroupPrefill,
    IndividualContactSession,
    IndividualNote,
    IndividualParticipant,
    IndividualSaveResult,
    RecentContact,
    UpsertOutcome,
)
from .repository import GroupContactRepository, IndividualContactRepository

logger = get_logger("contacts")


def _as_mapping(item: Any) -> Mapping[str, Any]:
    if isinstance(item, Mapping):
        return item
    return {"id": item}


def _new_contact_id() -> str:
    return str(uuid.uuid4())


class ContactSessionService:
    def __init__(
        self,
        groups: GroupContactRepository,
        individuals: IndividualContactRepository,
        lock: DocumentLock,
        cache: CacheService,
        *,
        mentor_names: Callable[[], Mapping[str, str]],
        person_names: Callable[[Iterable[str]], Mapping[str, str]],
        tz: ZoneInfo,
        clock: Callable[[], datetime],
        lock_timeout: float,
    ):
        self._groups = groups
        self._individuals = individuals
        self._lock = lock
        self._cache = cache
        self._mentor_names = mentor_names
        self._person_names = person_names
        self._tz = tz
        self._clock = clock
        self._lock_timeout = lock_timeout

    # ---------- group sessions ----------

    def _find_group_session(self, day: str, group: str) -> Optional[GroupContactSession]:
        hint_key = cache_keys.group_row_hint(day, group)
        hint = self._cache.get(hint_key)
        if hint is not None:
            s = self._groups.get_session(int(hint))
            if s is not None and s.day == day and s.group.strip() == group:
                return s
            logger.debug("Stale row hint for group session %s / %s", day, group)
            self._cache.remove(hint_key)

        for s in reversed(list(self._groups.list_sessions())):
            if s.day == day and s.group.strip() == group:
                self._cache.put(hint_key, s.row_key, GROUP_ROW_HINT_TTL_SECONDS)
                return s
        return None

    def _invalidate_prefill(self) -> None:
        self._cache.remove_prefix(cache_keys.GROUP_PREFILL_PREFIX)

    def create_or_update_group(
        self,
        *,
        day: Any,
        group: Any,
        topic: Any = "",
        summary: Any = "",
        duration_minutes: Any = None,
    ) -> UpsertOutcome:
        """Upsert the group session keyed by (date, trimmed group name)."""
        ymd_day = require_day(day, self._tz)
        name = require_non_empty(group, "group")
        duration = to_optional_int(duration_minutes)

        with hold(self._lock, self._lock_timeout, operation="createOrUpdateGroupContactSession"):
            now = self._clock()
            existing = self._find_group_session(ymd_day, name)
            if existing is not None:
                contact_id = existing.contact_id or _new_contact_id()
                self._groups.update_session(
                    existing.row_key,
                    topic=clean(topic),
                    summary=clean(summary),
                    duration_minutes=duration,
                    now=now,
                    contact_id=None if existing.contact_id else contact_id,
                )
                outcome = UpsertOutcome(contact_id=contact_id, created=False, row_key=existing.row_key)
            else:
                contact_id = _new_contact_id()
                row_key = self._groups.insert_session(
                    contact_id=contact_id,
                    day=ymd_day,
                    group=name,
                    topic=clean(topic),
                    summary=clean(summary),
                    duration_minutes=duration,
                    now=now,
                )
                outcome = UpsertOutcome(contact_id=contact_id, created=True, row_key=row_key)
                logger.info("Created group contact session %s for %s on %s", contact_id, name, ymd_day)

            self._cache.put(cache_keys.group_row_hint(ymd_day, name), outcome.row_key, GROUP_ROW_HINT_TTL_SECONDS)
            self._invalidate_prefill()
        return outcome

    def save_group_participants(self, contact_id: Any, participants: Optional[Sequence[Any]]) -> int:
        """Replace the participant list of a group session; returns the number of rows written."""
        cid = require_non_empty(contact_id, "contact ID")
        rows: list[GroupParticipant] = []
        for item in participants or []:
            p = _as_mapping(item)
            sid = clean(p.get("id") or p.get("studentId"))
            if not sid:
                continue
            first, last = clean(p.get("firstName")), clean(p.get("lastName"))
            if not first and not last:
                first, last = split_rest_last(p.get("name"))
            rows.append(GroupParticipant(contact_id=cid, student_id=sid, first_name=first, last_name=last))
        rows = unique(rows, key=lambda r: id_key(r.student_id))

        with hold(self._lock, self._lock_timeout, operation="saveGroupParticipants"):
            added = self._groups.replace_participants(cid, rows, now=self._clock())
            self._invalidate_prefill()
        return added

    def save_group_mentors(self, contact_id: Any, mentors: Optional[Sequence[Any]]) -> int:
        cid = require_non_empty(contact_id, "contact ID")
        raw = [_as_mapping(m) for m in mentors or []]
        ids = unique(
            (clean(m.get("id") or m.get("mentorId")).upper(), clean(m.get("name"))) for m in raw
        )
        known_names: Mapping[str, str] = {}
        if any(not name for _, name in ids):
            known_names = self._mentor_names()
        rows = unique(
            (
                GroupMentor(contact_id=cid, mentor_id=mid, name=name or known_names.get(mid) or mid)
                for mid, name in ids
                if mid
            ),
            key=lambda m: m.mentor_id,
        )

        with hold(self._lock, self._lock_timeout, operation="saveGroupMentors"):
            added = self._groups.replace_mentors(cid, rows, now=self._clock())
            self._invalidate_prefill()
        return added

    def save_full_group_note(
        self,
        *,
        day: Any,
        group: Any,
        topic: Any,
        summary: Any,
        duration_minutes: Any,
        participants: Optional[Sequence[Any]],
        mentors: Optional[Sequence[Any]],
    ) -> FullGroupNoteResult:
        with hold(self._lock, self._lock_timeout, operation="saveFullGroupNote"):
            outcome = self.create_or_update_group(
                day=day, group=group, topic=topic, summary=summary, duration_minutes=duration_minutes
            )
            participants_added = self.save_group_participants(outcome.contact_id, participants)
            mentors_added = self.save_group_mentors(outcome.contact_id, mentors)
        return FullGroupNoteResult(
            contact_id=outcome.contact_id,
            created=outcome.created,
            participants_added=participants_added,
            mentors_added=mentors_added,
        )

    def latest_group_session(self, day: Any, group: Any) -> Optional[GroupContactSession]:
        ymd_day = require_day(day, self._tz)
        name = require_non_empty(group, "group")
        return self._find_group_session(ymd_day, name)

    def contact_id_for_group(self, day: Any, group: Any) -> Optional[str]:
        session = self.latest_group_session(day, group)
        return (session.contact_id or None) if session else None

    def group_participants(self, contact_id: Any) -> list[GroupParticipant]:
        return list(self._groups.list_participants(require_non_empty(contact_id, "contact ID")))

    def group_prefill(self, day: Any, groups: Optional[Sequence[Any]]) -> dict[str, GroupPrefill]:
        """Prefill data for several groups on one day, sliced from one cached full-day index."""
        ymd_day = require_day(day, self._tz)
        key = cache_keys.group_prefill(ymd_day)
        index: Optional[dict[str, GroupPrefill]] = self._cache.get(key)
        if index is None:
            latest: dict[str, GroupContactSession] = {}
            for s in self._groups.list_sessions():
                if s.day == ymd_day and s.group.strip():
                    latest[s.group.strip()] = s
            wanted_ids = {s.contact_id for s in latest.values() if s.contact_id}
            mentors_by_contact: dict[str, list[dict[str, Any]]] = defaultdict(list)
            for m in self._groups.list_mentors():
                if m.contact_id in wanted_ids:
                    mentors_by_contact[m.contact_id].append(m.to_dict())
            index = {
                g: GroupPrefill(
                    contact_id=s.contact_id or None,
                    note=s.note(),
                    mentors=mentors_by_contact.get(s.contact_id, []),
                )
                for g, s in latest.items()
            }
            self._cache.put(key, index, GROUP_PREFILL_TTL_SECONDS)

        out: dict[str, GroupPrefill] = {}
        for g in groups or []:
            name = clean(g)
            if name:
                out[name] = index.get(name) or GroupPrefill(contact_id=None, note=None, mentors=[])
        return out

    # ---------- individual sessions ----------

    def create_individual(self, *, day: Any, people: Optional[Sequence[Any]], note: IndividualNote) -> IndividualSaveResult:
        """Always mints a new contact id; participants are de-duplicated by student id."""
        entries = []
        for item in people or []:
            p = _as_mapping(item)
            sid = clean(p.get("id") or p.get("studentId"))
            if sid:
                entries.append((sid, clean(p.get("notes") or p.get("notesStudent"))))
        entries = unique(entries, key=lambda e: id_key(e[0]))
        if not entries:
            raise ValidationError("Select at least one student.")

        with hold(self._lock, self._lock_timeout, operation="saveIndividualContactSession"):
            now = self._clock()
            contact_id = _new_contact_id()
            session = IndividualContactSession(
                contact_id=contact_id,
                day=day_or_today(day, self._tz, now),
                note=note,
                created_at=now,
                edited_at=now,
            )
            self._individuals.insert_session(
                session,
                [IndividualParticipant(contact_id=contact_id, student_id=sid, notes_student=n) for sid, n in entries],
            )
            self._cache.remove(cache_keys.RECENT_CONTACTS)
        logger.info("Saved individual contact %s for %s student(s)", contact_id, len(entries))
        return IndividualSaveResult(
            contact_id=contact_id,
            participants_saved=len(entries),
            student_ids=[sid for sid, _ in entries],
        )

    def _recent_snapshot(self) -> tuple[list[IndividualContactSession], list[IndividualParticipant]]:
        cached = self._cache.get(cache_keys.RECENT_CONTACTS)
        if cached is not None:
            return cached
        snapshot = (list(self._individuals.list_sessions()), list(self._individuals.list_participants()))
        self._cache.put(cache_keys.RECENT_CONTACTS, snapshot, RECENT_CONTACTS_TTL_SECONDS)
        return snapshot

    def recent_contacts_for_ids(self, ids: Optional[Sequence[Any]], per_id: Any = None) -> dict[str, list[RecentContact]]:
        targets = unique(clean(x) for x in ids or [] if clean(x))
        if not targets:
            return {}
        n = clamp_limit(per_id, default=DEFAULT_RECENT_PER_ID, minimum=1, maximum=MAX_RECENT_PER_ID)

        sessions, links = self._recent_snapshot()
        by_contact = {s.contact_id: s for s in sessions}
        mentor_names = self._mentor_names()
        names = self._person_names(targets)

        out: dict[str, list[RecentContact]] = {t: [] for t in targets}
        for link in links:
            if link.student_id not in out:
                continue
            s = by_contact.get(link.contact_id)
            if s is None:
                continue
            mid = s.note.mentor_id
            out[link.student_id].append(
                RecentContact(
                    contact_id=s.contact_id,
                    day=s.day,
                    display_name=names.get(link.student_id, ""),
                    mentor_id=mid,
                    mentor_name=(mentor_names.get(mid) or mid) if mid else "",
                    note=s.note,
                    edited_at=s.edited_at,
                )
            )
        for sid, items in out.items():
            items.sort(key=lambda c: c.day, reverse=True)
            out[sid] = items[:n]
        return out
