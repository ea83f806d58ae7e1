from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..app_logger import get_logger
from ..common.text import clean
from ..core.exceptions import MissingTableError, SchemaError
from .repository import StoredRow, TabularStore
from .schema import TableSchema, missing_labels, resolve_columns

logger = get_logger("storage")


@dataclass(frozen=True)
class RowView:
    """Read access to a stored row by logical field name."""

    key: int
    values: tuple[Any, ...]
    columns: Mapping[str, int]

    def get(self, field: str, default: Any = "") -> Any:
        idx = self.columns.get(field)
        if idx is None or idx >= len(self.values):
            return default
        value = self.values[idx]
        return default if value is None else value

    def text(self, field: str) -> str:
        return clean(self.get(field))


class Table:
    """A table whose logical columns were resolved against its live header."""

    def __init__(self, store: TabularStore, schema: TableSchema, header: Sequence[str], columns: Mapping[str, int]):
        self._store = store
        self._schema = schema
        self._header = list(header)
        self._columns = dict(columns)

    @property
    def name(self) -> str:
        return self._schema.name

    @property
    def header(self) -> list[str]:
        return list(self._header)

    def has(self, field: str) -> bool:
        return field in self._columns

    def index(self, field: str) -> int:
        idx = self._columns.get(field)
        if idx is None:
            raise SchemaError(f"Column '{field}' is not available in table '{self.name}'.")
        return idx

    def require(self, *fields: str) -> None:
        for f in fields:
            self.index(f)

    def _view(self, row: StoredRow) -> RowView:
        return RowView(key=row.key, values=row.values, columns=self._columns)

    def rows(self) -> list[RowView]:
        return [self._view(r) for r in self._store.scan(self.name)]

    def get(self, key: int) -> Optional[RowView]:
        found = self._store.get_rows(self.name, [int(key)])
        row = found.get(int(key))
        return self._view(row) if row else None

    def get_many(self, keys: Iterable[int]) -> dict[int, RowView]:
        return {k: self._view(r) for k, r in self._store.get_rows(self.name, keys).items()}

    def _positions(self, record: Mapping[str, Any]) -> dict[int, Any]:
        out: dict[int, Any] = {}
        for field, value in record.items():
            idx = self._columns.get(field)
            if idx is None:
                if self._schema.column(field).optional:
                    continue
                raise SchemaError(f"Column '{field}' is not available in table '{self.name}'.")
            out[idx] = value
        return out

    def build_row(self, record: Mapping[str, Any]) -> list[Any]:
        values: list[Any] = [""] * len(self._header)
        for idx, value in self._positions(record).items():
            values[idx] = value
        return values

    def append(self, record: Mapping[str, Any]) -> int:
        return self.append_many([record])[0]

    def append_many(self, records: Sequence[Mapping[str, Any]]) -> list[int]:
        if not records:
            return []
        rows = [self.build_row(r) for r in records]
        return self._store.append_rows(self.name, rows)

    def update(self, key: int, changes: Mapping[str, Any]) -> bool:
        return bool(self.update_many({int(key): changes}))

    def update_many(self, changes_by_key: Mapping[int, Mapping[str, Any]]) -> list[int]:
        """Write logical changes to existing rows; keys that no longer exist are skipped."""
        updates = {int(k): self._positions(ch) for k, ch in changes_by_key.items()}
        if not updates:
            return []
        return self._store.update_rows(self.name, updates)

    def delete(self, keys: Iterable[int]) -> int:
        return self._store.delete_rows(self.name, [int(k) for k in keys])


def _resolve(store: TabularStore, schema: TableSchema) -> Table:
    header = store.get_header(schema.name)
    if schema.extend_header:
        labels = missing_labels(header, schema)
        if labels:
            logger.info("Appending columns %s to table '%s'", labels, schema.name)
            header = store.add_columns(schema.name, labels)
    return Table(store, schema, header, resolve_columns(header, schema.columns))


def ensure_table(store: TabularStore, schema: TableSchema) -> Table:
    """Open a table, creating it with the default header if allowed.

    Missing writable columns are appended to the right of the live header and the
    header is re-resolved, so existing columns and rows keep their positions.
    """
    if not store.has_table(schema.name):
        if not schema.create_if_missing:
            raise MissingTableError(f"Table '{schema.name}' does not exist.")
        logger.info("Creating table '%s'", schema.name)
        store.create_table(schema.name, schema.default_header)
    return _resolve(store, schema)


def open_existing(store: TabularStore, schema: TableSchema) -> Optional[Table]:
    """Open a table for reading; None when it does not exist."""
    if not store.has_table(schema.name):
        return None
    return _resolve(store, schema)
