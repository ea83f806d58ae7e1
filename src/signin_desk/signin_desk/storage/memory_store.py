from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.text import norm_key
from ..core.exceptions import MissingTableError
from .repository import StoredRow


@dataclass
class _Sheet:
    header: list[str]
    rows: dict[int, list[Any]] = field(default_factory=dict)


class InMemoryTabularStore:
    """Process-local tabular store.

    Row keys come from a single counter so they are unique across tables and never reused.
    Rows keep insertion order.
    """

    def __init__(self, tables: Optional[Mapping[str, Sequence[Sequence[Any]]]] = None):
        self._sheets: dict[str, _Sheet] = {}
        self._keys = itertools.count(1)
        self._mutex = threading.Lock()
        for name, data in (tables or {}).items():
            header, *rows = data
            self.create_table(name, [str(h) for h in header])
            if rows:
                self.append_rows(name, rows)

    def _sheet(self, name: str) -> _Sheet:
        sheet = self._sheets.get(name)
        if sheet is None:
            raise MissingTableError(f"Table '{name}' does not exist.")
        return sheet

    @staticmethod
    def _freeze(sheet: _Sheet, key: int, values: list[Any]) -> StoredRow:
        width = len(sheet.header)
        padded = values + [""] * (width - len(values))
        return StoredRow(key=key, values=tuple(padded))

    def has_table(self, name: str) -> bool:
        with self._mutex:
            return name in self._sheets

    def create_table(self, name: str, header: Sequence[str]) -> None:
        with self._mutex:
            if name not in self._sheets:
                self._sheets[name] = _Sheet(header=list(header))

    def drop_table(self, name: str) -> None:
        with self._mutex:
            self._sheets.pop(name, None)

    def get_header(self, name: str) -> list[str]:
        with self._mutex:
            return list(self._sheet(name).header)

    def add_columns(self, name: str, labels: Sequence[str]) -> list[str]:
        with self._mutex:
            sheet = self._sheet(name)
            existing = {norm_key(h) for h in sheet.header}
            sheet.header.extend(l for l in labels if norm_key(l) not in existing)
            return list(sheet.header)

    def scan(self, name: str) -> list[StoredRow]:
        with self._mutex:
            sheet = self._sheet(name)
            return [self._freeze(sheet, k, v) for k, v in sheet.rows.items()]

    def get_rows(self, name: str, keys: Iterable[int]) -> dict[int, StoredRow]:
        with self._mutex:
            sheet = self._sheet(name)
            out: dict[int, StoredRow] = {}
            for k in keys:
                values = sheet.rows.get(int(k))
                if values is not None:
                    out[int(k)] = self._freeze(sheet, int(k), values)
            return out

    def append_rows(self, name: str, rows: Sequence[Sequence[Any]]) -> list[int]:
        with self._mutex:
            sheet = self._sheet(name)
            keys: list[int] = []
            for values in rows:
                k = next(self._keys)
                sheet.rows[k] = list(values)
                keys.append(k)
            return keys

    def update_rows(self, name: str, updates: Mapping[int, Mapping[int, Any]]) -> list[int]:
        with self._mutex:
            sheet = self._sheet(name)
            applied: list[int] = []
            for k, changes in updates.items():
                values = sheet.rows.get(int(k))
                if values is None:
                    continue
                for idx, value in changes.items():
                    if idx >= len(values):
                        values.extend([""] * (idx + 1 - len(values)))
                    values[idx] = value
                applied.append(int(k))
            return applied

    def delete_rows(self, name: str, keys: Iterable[int]) -> int:
        with self._mutex:
            sheet = self._sheet(name)
            removed = 0
            for k in keys:
                if sheet.rows.pop(int(k), None) is not None:
                    removed += 1
            return removed
