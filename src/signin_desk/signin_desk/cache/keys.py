"""Cache keys. Bump the version suffix when a cached shape changes."""

from __future__ import annotations

KNOWN_STUDENTS = "signin:known:v1"
ROSTER_INDEX = "roster:index:v1"
RECENT_CONTACTS = "contacts:recent:v1"

GROUP_PREFILL_PREFIX = "group:prefill:v1:"
GROUP_ROW_HINT_PREFIX = "group:row:v1:"

# Families that CACHE_TTLS can retune, by key prefix.
TTL_FAMILIES = {
    "known_students": "signin:known:",
    "roster_index": "roster:index:",
    "recent_contacts": "contacts:recent:",
    "mentors": "mentors:",
    "group_prefill": GROUP_PREFILL_PREFIX,
    "group_row_hint": GROUP_ROW_HINT_PREFIX,
}


def mentors(active_only: bool) -> str:
    return f"mentors:{'active' if active_only else 'all'}:v1"


def group_prefill(day: str) -> str:
    return f"{GROUP_PREFILL_PREFIX}{day}"


def group_row_hint(day: str, group: str) -> str:
    return f"{GROUP_ROW_HINT_PREFIX}{day}|{group}"
