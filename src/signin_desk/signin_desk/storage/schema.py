from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from ..common.text import norm_key


@dataclass(frozen=True)
class Column:
    """Logical column.

    ``aliases`` are normalized header keys tried in order. ``label`` is the header
    written when the column has to be created; columns without a label are
    read-only extras that are used when present and never appended.
    """

    field: str
    aliases: tuple[str, ...]
    label: Optional[str] = None
    optional: bool = False

    def keys(self) -> tuple[str, ...]:
        if self.label and norm_key(self.label) not in self.aliases:
            return self.aliases + (norm_key(self.label),)
        return self.aliases


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: tuple[Column, ...]
    # Owned tables are created on first use and get missing columns appended;
    # external ones (attendance, roster, mentors) are only ever read as they are.
    create_if_missing: bool = True
    extend_header: bool = True

    @property
    def default_header(self) -> list[str]:
        return [c.label for c in self.columns if c.label]

    def column(self, field: str) -> Column:
        for c in self.columns:
            if c.field == field:
                return c
        raise KeyError(field)


def resolve_columns(header: Sequence[Any], columns: Iterable[Column]) -> dict[str, int]:
    """Map logical fields to physical column indices.

    The first physical column wins when two headers normalize to the same key,
    and a physical column is never claimed by two logical fields.
    """
    by_key: dict[str, int] = {}
    for i, h in enumerate(header):
        k = norm_key(h)
        if k and k not in by_key:
            by_key[k] = i

    resolved: dict[str, int] = {}
    taken: set[int] = set()
    for col in columns:
        for alias in col.keys():
            idx = by_key.get(alias)
            if idx is not None and idx not in taken:
                resolved[col.field] = idx
                taken.add(idx)
                break
    return resolved


def missing_labels(header: Sequence[Any], schema: TableSchema) -> list[str]:
    """Labels of the schema's writable columns the header cannot resolve."""
    resolved = resolve_columns(header, schema.columns)
    return [c.label for c in schema.columns if c.label and c.field not in resolved]
