from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, Sequence


@dataclass(frozen=True)
class StoredRow:
    """A physical row. ``key`` is stable for the row's lifetime and never reused."""

    key: int
    values: tuple[Any, ...]


class TabularStore(Protocol):
    """Named tables of header + rows. Implementations: in-memory and MySQL."""

    def has_table(self, name: str) -> bool:
        raise NotImplementedError

    def create_table(self, name: str, header: Sequence[str]) -> None:
        raise NotImplementedError

    def get_header(self, name: str) -> list[str]:
        raise NotImplementedError

    def add_columns(self, name: str, labels: Sequence[str]) -> list[str]:
        """Append columns to the right of the header; returns the new header."""

        raise NotImplementedError

    def scan(self, name: str) -> list[StoredRow]:
        raise NotImplementedError

    def get_rows(self, name: str, keys: Iterable[int]) -> dict[int, StoredRow]:
        raise NotImplementedError

    def append_rows(self, name: str, rows: Sequence[Sequence[Any]]) -> list[int]:
        raise NotImplementedError

    def update_rows(self, name: str, updates: Mapping[int, Mapping[int, Any]]) -> list[int]:
        """Apply ``{row_key: {column_index: value}}``. Missing rows are skipped; returns applied keys."""

        raise NotImplementedError

    def delete_rows(self, name: str, keys: Iterable[int]) -> int:
        raise NotImplementedError
