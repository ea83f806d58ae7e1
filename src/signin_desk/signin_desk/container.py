from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from .attendance.table_attendance_repository import TableAttendanceRepository
from .cache.keys import TTL_FAMILIES
from .cache.service import CacheService
from .common.datetime_utils import get_zone, now_local
from .contacts.service import ContactSessionService
from .contacts.table_contact_repository import TableGroupContactRepository, TableIndividualContactRepository
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_TIMEZONE
from .core.exceptions import ConfigurationError
from .database.connection import DBConfig, DatabaseConnection
from .desk.coordinator import SignInDesk
from .locking.base import DocumentLock
from .locking.local_lock import LocalDocumentLock
from .locking.mysql_lock import MySQLDocumentLock
from .mentors.service import MentorDirectory
from .mentors.table_mentor_repository import TableMentorRepository
from .queue.service import QueueService
from .queue.table_queue_repository import TableQueueRepository
from .roster.service import RosterDirectory
from .roster.table_known_student_repository import TableKnownStudentRepository
from .roster.table_sources import AttendanceSource, KnownStudentSource, RosterTableSource, SignInLogSource
from .sessions.service import SignInSessionService
from .sessions.table_session_repository import TableSessionRepository
from .storage.memory_store import InMemoryTabularStore
from .storage.mysql_store import MySQLTabularStore
from .storage.repository import TabularStore
from .storage.tables import attendance_schema, mentors_schema, roster_schema


@dataclass(frozen=True)
class Container:
    store: TabularStore
    lock: DocumentLock
    cache: CacheService

    known_students_repo: TableKnownStudentRepository
    sessions_repo: TableSessionRepository
    queue_repo: TableQueueRepository
    attendance_repo: TableAttendanceRepository
    mentors_repo: TableMentorRepository
    group_contacts_repo: TableGroupContactRepository
    individual_contacts_repo: TableIndividualContactRepository

    roster: RosterDirectory
    mentors: MentorDirectory
    session_service: SignInSessionService
    queue_service: QueueService
    contact_service: ContactSessionService
    desk: SignInDesk


def _as_db_config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )


def build_container(
    *,
    storage_backend: str = "memory",
    db_config: Optional[dict] = None,
    lock_backend: Optional[str] = None,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    timezone: str = DEFAULT_TIMEZONE,
    attendance_table: str = "attendance",
    roster_tables: Sequence[str] = (),
    mentors_table: str = "mentors",
    cache_ttls: Optional[Mapping[str, int]] = None,
    store: Optional[TabularStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    tz = get_zone(timezone)
    clock = clock or (lambda: now_local(tz))
    backend = (storage_backend or "memory").lower()
    lock_kind = (lock_backend or backend).lower()

    conn: Optional[DatabaseConnection] = None
    if backend == "mysql" or lock_kind == "mysql":
        if not db_config:
            raise ConfigurationError("DB_CONFIG is required for the MySQL backend.")
        conn = DatabaseConnection.get_instance(_as_db_config(db_config))

    if store is None:
        if backend == "mysql":
            store = MySQLTabularStore(conn)
        elif backend == "memory":
            store = InMemoryTabularStore()
        else:
            raise ConfigurationError(f"Unknown storage backend: {storage_backend!r}")

    if lock_kind == "mysql":
        lock: DocumentLock = MySQLDocumentLock(conn)
    elif lock_kind in {"local", "memory"}:
        lock = LocalDocumentLock()
    else:
        raise ConfigurationError(f"Unknown lock backend: {lock_backend!r}")

    unknown = sorted(set(cache_ttls or {}) - set(TTL_FAMILIES))
    if unknown:
        raise ConfigurationError(f"Unknown CACHE_TTLS families: {', '.join(unknown)}")
    cache = CacheService(ttl_overrides={TTL_FAMILIES[f]: ttl for f, ttl in (cache_ttls or {}).items()})

    known_students_repo = TableKnownStudentRepository(store)
    sessions_repo = TableSessionRepository(store, tz=tz)
    queue_repo = TableQueueRepository(store, tz=tz)
    attendance = attendance_schema(attendance_table)
    attendance_repo = TableAttendanceRepository(store, attendance)
    mentors_repo = TableMentorRepository(store, mentors_schema(mentors_table))
    group_contacts_repo = TableGroupContactRepository(store, tz=tz)
    individual_contacts_repo = TableIndividualContactRepository(store, tz=tz)

    sources = [
        *(RosterTableSource(store, roster_schema(name), tz=tz) for name in roster_tables),
        SignInLogSource(store, tz=tz),
        AttendanceSource(store, attendance, tz=tz),
    ]
    roster = RosterDirectory(
        known_students_repo,
        KnownStudentSource(known_students_repo, tz=tz),
        sources,
        cache,
        clock=clock,
    )
    mentors = MentorDirectory(mentors_repo, cache)

    session_service = SignInSessionService(sessions_repo, lock, tz=tz, clock=clock, lock_timeout=lock_timeout)
    queue_service = QueueService(
        queue_repo,
        lock,
        names_for_ids=roster.names_for_ids,
        tz=tz,
        clock=clock,
        lock_timeout=lock_timeout,
    )
    contact_service = ContactSessionService(
        group_contacts_repo,
        individual_contacts_repo,
        lock,
        cache,
        mentor_names=mentors.name_map,
        person_names=roster.names_for_ids,
        tz=tz,
        clock=clock,
        lock_timeout=lock_timeout,
    )
    desk = SignInDesk(
        sessions=session_service,
        queue=queue_service,
        contacts=contact_service,
        roster=roster,
        attendance=attendance_repo,
        mentors=mentors,
        lock=lock,
        lock_timeout=lock_timeout,
        clock=clock,
    )

    return Container(
        store=store,
        lock=lock,
        cache=cache,
        known_students_repo=known_students_repo,
        sessions_repo=sessions_repo,
        queue_repo=queue_repo,
        attendance_repo=attendance_repo,
        mentors_repo=mentors_repo,
        group_contacts_repo=group_contacts_repo,
        individual_contacts_repo=individual_contacts_repo,
        roster=roster,
        mentors=mentors,
        session_service=session_service,
        queue_service=queue_service,
        contact_service=contact_service,
        desk=desk,
    )
