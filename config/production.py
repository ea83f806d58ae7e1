import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")
LOCK_BACKEND = os.getenv("LOCK_BACKEND", "") or None

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "signin_desk"),
}

TIMEZONE = os.getenv("TIMEZONE", "America/Chicago")
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "30"))

# Per-family cache lifetimes in seconds, e.g. "roster_index=120,mentors=900".
CACHE_TTLS = {
    name.strip(): int(seconds)
    for name, _, seconds in (item.partition("=") for item in os.getenv("CACHE_TTLS", "").split(","))
    if name.strip() and seconds.strip()
}

ATTENDANCE_TABLE = os.getenv("ATTENDANCE_TABLE", "attendance")
MENTORS_TABLE = os.getenv("MENTORS_TABLE", "mentors")
ROSTER_TABLES = [t.strip() for t in os.getenv("ROSTER_TABLES", "roster_2026,roster_2025").split(",") if t.strip()]

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_TABLES = bool(int(os.getenv("AUTO_INIT_TABLES", "1")))
AUTO_CREATE_DATABASE = bool(int(os.getenv("AUTO_CREATE_DATABASE", "0")))
