from __future__ import annotations

from ..cache import keys as cache_keys
from ..cache.service import CacheService
from ..common.text import fold
from ..core.constants import MENTORS_TTL_SECONDS
from .model import Mentor
from .repository import MentorRepository


class MentorDirectory:
    def __init__(self, mentors: MentorRepository, cache: CacheService):
        self._mentors = mentors
        self._cache = cache

    def list(self, *, active_only: bool = True) -> list[Mentor]:
        key = cache_keys.mentors(active_only)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        items = [m for m in self._mentors.list_all() if m.active or not active_only]
        items.sort(key=lambda m: (fold(m.last_name), fold(m.first_name), m.mentor_id))
        self._cache.put(key, items, MENTORS_TTL_SECONDS)
        return items

    def name_map(self) -> dict[str, str]:
        return {m.mentor_id: m.name for m in self.list(active_only=False)}
