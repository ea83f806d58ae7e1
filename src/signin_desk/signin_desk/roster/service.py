from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from ..app_logger import get_logger
from ..cache import keys as cache_keys
from ..cache.service import CacheService
from ..common.text import clean, fold, id_key
from ..common.validators import clamp_limit, require_non_empty
from ..core.constants import (
    DEFAULT_SUGGEST_LIMIT,
    KNOWN_STUDENTS_TTL_SECONDS,
    MAX_SUGGEST_LIMIT,
    ROSTER_INDEX_TTL_SECONDS,
)
from ..core.exceptions import NotFoundError
from .grades import normalize_grade
from .model import BootstrapSummary, KnownStudent, Person, SourceRecord, Suggestion, UpsertResult
from .repository import KnownStudentRepository, PersonSource

logger = get_logger("roster")

_MERGED_FIELDS = ("first_name", "last_name", "school", "grade", "email")

SCORE_EXACT = 6
SCORE_PREFIX = 4
SCORE_SUBSTRING = 2


class _Merged:
    """Per-person merge state. Each field remembers the priority of the source that set it."""

    def __init__(self, person_id: str):
        self.person_id = person_id
        self.values: dict[str, str] = {}
        self.stamps: dict[str, int] = {}
        self.source = ""
        self.source_priority = -1
        self.last_seen: Optional[datetime] = None

    def absorb(self, rec: SourceRecord) -> None:
        if rec.priority > self.source_priority:
            self.source = rec.source
            self.source_priority = rec.priority
        for field in _MERGED_FIELDS:
            value = clean(getattr(rec, field))
            if field == "grade":
                value = normalize_grade(value)
            if not value:
                continue
            # Strictly higher priority overrides; within a tier the first value seen stays.
            if field not in self.values or rec.priority > self.stamps[field]:
                self.values[field] = value
                self.stamps[field] = rec.priority
        if rec.seen_at is not None and (self.last_seen is None or rec.seen_at > self.last_seen):
            self.last_seen = rec.seen_at

    def person(self) -> Person:
        return Person(person_id=self.person_id, **{f: self.values.get(f, "") for f in _MERGED_FIELDS})


def merge_records(records: Iterable[SourceRecord]) -> dict[str, _Merged]:
    merged: dict[str, _Merged] = {}
    for rec in records:
        key = id_key(rec.person_id)
        if not key:
            continue
        entry = merged.get(key)
        if entry is None:
            entry = merged[key] = _Merged(clean(rec.person_id))
        entry.absorb(rec)
    return merged


def score_person(person: Person, tokens: Sequence[str]) -> int:
    fields = [
        fold(v)
        for v in (person.person_id, person.first_name, person.last_name, person.full_name, person.school, person.email, person.grade)
        if clean(v)
    ]
    score = 0
    for token in tokens:
        for value in fields:
            if value == token:
                score += SCORE_EXACT
            elif value.startswith(token):
                score += SCORE_PREFIX
            elif token in value:
                score += SCORE_SUBSTRING
    return score


class RosterDirectory:
    """Merged, de-duplicated people index over known students and the roster/log/attendance tables."""

    def __init__(
        self,
        known: KnownStudentRepository,
        known_source: PersonSource,
        sources: Sequence[PersonSource],
        cache: CacheService,
        *,
        clock: Callable[[], datetime],
    ):
        self._known = known
        self._known_source = known_source
        self._sources = list(sources)
        self._cache = cache
        self._clock = clock

    def invalidate(self) -> None:
        self._cache.remove(cache_keys.KNOWN_STUDENTS, cache_keys.ROSTER_INDEX)

    def build_index(self, sources: Optional[Sequence[PersonSource]] = None) -> dict[str, Person]:
        """Merge the given sources (default: known students plus every table source) by id."""
        chosen = list(sources) if sources is not None else [self._known_source, *self._sources]
        merged = merge_records(rec for src in chosen for rec in src.records())
        return {k: m.person() for k, m in merged.items()}

    def _index(self) -> dict[str, tuple[Person, str]]:
        cached = self._cache.get(cache_keys.ROSTER_INDEX)
        if cached is not None:
            return cached
        merged = merge_records(rec for src in [self._known_source, *self._sources] for rec in src.records())
        index = {k: (m.person(), m.source) for k, m in merged.items()}
        self._cache.put(cache_keys.ROSTER_INDEX, index, ROSTER_INDEX_TTL_SECONDS)
        return index

    def known_students(self) -> list[KnownStudent]:
        cached = self._cache.get(cache_keys.KNOWN_STUDENTS)
        if cached is not None:
            return cached
        students = list(self._known.list_all())
        self._cache.put(cache_keys.KNOWN_STUDENTS, students, KNOWN_STUDENTS_TTL_SECONDS)
        return students

    def suggest(self, query: Any, limit: Any = None) -> list[Suggestion]:
        tokens = [t for t in (fold(x) for x in clean(query).split()) if t]
        if not tokens:
            return []
        n = clamp_limit(limit, default=DEFAULT_SUGGEST_LIMIT, minimum=1, maximum=MAX_SUGGEST_LIMIT)

        hits: list[Suggestion] = []
        for person, source in self._index().values():
            score = score_person(person, tokens)
            if score > 0:
                hits.append(Suggestion(person=person, source=source, score=score))
        hits.sort(key=lambda s: (-s.score, fold(s.person.full_name), s.person.person_id))
        return hits[:n]

    def lookup(self, person_id: Any) -> tuple[Person, bool]:
        """Known students first, then the merged roster. Returns (person, is_known)."""
        pid = require_non_empty(person_id, "student ID")
        for s in self.known_students():
            if id_key(s.person_id) == id_key(pid):
                return s, True
        entry = self._index().get(id_key(pid))
        if entry is None:
            raise NotFoundError(f"No student found for ID {pid}.")
        return entry[0], False

    def names_for_ids(self, ids: Iterable[Any]) -> dict[str, str]:
        index = self._index()
        out: dict[str, str] = {}
        for raw in ids:
            pid = clean(raw)
            if not pid:
                continue
            entry = index.get(id_key(pid))
            out[pid] = entry[0].full_name if entry else ""
        return out

    def check_id_status(self, person_id: Any) -> dict[str, Any]:
        pid = require_non_empty(person_id, "student ID")
        known = any(id_key(s.person_id) == id_key(pid) for s in self.known_students())
        entry = self._index().get(id_key(pid))
        return {
            "id": pid,
            "exists": known or entry is not None,
            "known": known,
            "inDirectory": entry is not None,
            "person": entry[0].to_dict() if entry else None,
        }

    def upsert_known_student(self, person: Person, *, sign_in_at: Optional[datetime] = None) -> UpsertResult:
        result = self._known.upsert(person, now=self._clock(), sign_in_at=sign_in_at)
        self.invalidate()
        return result

    def bootstrap_known_students(self) -> BootstrapSummary:
        """Seed known students from every table source; existing known ids are left alone."""
        counts: dict[str, int] = {}
        records: list[SourceRecord] = []
        for src in self._sources:
            batch = list(src.records())
            counts[src.name] = len(batch)
            records.extend(batch)
        merged = merge_records(records)

        existing = {id_key(s.person_id) for s in self._known.list_all()}
        now = self._clock()
        fresh = [
            KnownStudent(**asdict(m.person()), created_at=now, last_sign_in=m.last_seen)
            for k, m in merged.items()
            if k not in existing
        ]
        added = self._known.insert_many(fresh, now=now) if fresh else 0
        self.invalidate()
        logger.info("Known students bootstrap: added=%s collected=%s", added, len(merged))
        return BootstrapSummary(
            added=added,
            skipped_existing=len(merged) - len(fresh),
            sources=counts,
            total_known=len(existing) + added,
            collected=len(merged),
        )
