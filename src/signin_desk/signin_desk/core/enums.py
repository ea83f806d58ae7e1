from __future__ import annotations

from enum import Enum, IntEnum


class SessionType(str, Enum):
    """Kind of sign-in session: group sessions write attendance, individual ones feed the queue."""

    GROUP = "group"
    INDIVIDUAL = "individual"


class QueueStatus(str, Enum):
    """Lifecycle of a sign-in queue entry. PROCESSED is terminal."""

    PENDING = "Pending"
    CLAIMED = "Claimed"
    PROCESSED = "Processed"


class SourcePriority(IntEnum):
    """Trust order of the tables the roster directory is merged from (higher wins)."""

    ATTENDANCE = 0
    SIGN_IN_LOG = 1
    KNOWN_STUDENTS = 2
    ROSTER = 3
