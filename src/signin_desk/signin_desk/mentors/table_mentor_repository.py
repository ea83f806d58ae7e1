from __future__ import annotations

from typing import Sequence

from ..common.text import to_bool
from ..storage.repository import TabularStore
from ..storage.schema import TableSchema
from ..storage.table import open_existing
from ..storage.tables import mentors_schema
from .model import Mentor
from .repository import MentorRepository


class TableMentorRepository(MentorRepository):
    def __init__(self, store: TabularStore, schema: TableSchema | None = None):
        self._store = store
        self._schema = schema or mentors_schema()

    def list_all(self) -> Sequence[Mentor]:
        table = open_existing(self._store, self._schema)
        if table is None:
            return []
        return [
            Mentor(
                mentor_id=r.text("mentor_id").upper(),
                first_name=r.text("first_name"),
                last_name=r.text("last_name"),
                active=to_bool(r.get("active"), default=True),
            )
            for r in table.rows()
            if r.text("mentor_id")
        ]
