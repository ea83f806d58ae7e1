from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AttendanceEntry:
    row_key: int
    timestamp: datetime
    person_id: str
    first_name: str
    last_name: str
    school: str
    grade: str
    group: str
