"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_LOCK_TIMEOUT_SECONDS = 30

DEFAULT_SUGGEST_LIMIT = 10
MAX_SUGGEST_LIMIT = 20

DEFAULT_RECENT_PER_ID = 5
MAX_RECENT_PER_ID = 50

# Cache lifetimes, in seconds.
KNOWN_STUDENTS_TTL_SECONDS = 300
ROSTER_INDEX_TTL_SECONDS = 600
MENTORS_TTL_SECONDS = 600
GROUP_PREFILL_TTL_SECONDS = 60
GROUP_ROW_HINT_TTL_SECONDS = 300
RECENT_CONTACTS_TTL_SECONDS = 60

UNKNOWN_CLAIMANT = "unknown"
