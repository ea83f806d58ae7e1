from __future__ import annotations

import re
import unicodedata
from typing import Any, Callable, Hashable, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_PERSON_NAME_RE = re.compile(r"^[A-Za-z]+\s+[A-Za-z]")
_WORD_START_RE = re.compile(r"\b\w")


def clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def fold(value: Any) -> str:
    """Lower-case and strip diacritics, so 'José' and 'jose' compare equal."""
    text = unicodedata.normalize("NFD", clean(value))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.lower()


def norm_key(value: Any) -> str:
    """Header/label key: folded, with every non-alphanumeric removed."""
    return _NON_ALNUM_RE.sub("", fold(value))


def title_words(value: Any) -> str:
    """Upper-case the first letter of each word and leave the rest untouched."""
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), clean(value))


def split_first_rest(full_name: Any) -> tuple[str, str]:
    """'Ana Maria Lopez' -> ('Ana', 'Maria Lopez')."""
    parts = clean(full_name).split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def split_rest_last(full_name: Any) -> tuple[str, str]:
    """'Ana Maria Lopez' -> ('Ana Maria', 'Lopez'). A single token is a last name."""
    parts = clean(full_name).split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return "", parts[0]
    return " ".join(parts[:-1]), parts[-1]


def looks_like_person_name(value: Any) -> bool:
    return bool(_PERSON_NAME_RE.match(clean(value)))


def to_bool(value: Any, *, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = clean(value).lower()
    if text in {"false", "no", "n", "0", "inactive", "off"}:
        return False
    if text in {"true", "yes", "y", "1", "active", "on"}:
        return True
    return default


def to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(clean(value)))
    except (TypeError, ValueError):
        return default


def to_optional_int(value: Any) -> Optional[int]:
    text = clean(value)
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def unique(items: Iterable[T], key: Optional[Callable[[T], Hashable]] = None) -> list[T]:
    """Order-preserving de-duplication."""
    seen: set = set()
    out: list[T] = []
    for item in items:
        k = key(item) if key else item
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def contiguous_runs(keys: Iterable[int]) -> Iterator[list[int]]:
    """Group sorted, de-duplicated keys into runs of consecutive integers."""
    run: list[int] = []
    for k in sorted(set(int(x) for x in keys)):
        if run and k != run[-1] + 1:
            yield run
            run = []
        run.append(k)
    if run:
        yield run


def append_unique_csv(existing: Any, value: Any) -> str:
    """Append ``value`` to a comma-separated list unless already present."""
    items = [p.strip() for p in clean(existing).split(",") if p.strip()]
    new = clean(value)
    if new and new not in items:
        items.append(new)
    return ",".join(items)


def id_key(value: Any) -> str:
    """Comparison key for person/mentor ids: trimmed and upper-cased."""
    return clean(value).upper()
