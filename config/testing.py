SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
LOCK_BACKEND = "local"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "signin_desk_test",
}

TIMEZONE = "America/Chicago"
LOCK_TIMEOUT_SECONDS = 1.0
CACHE_TTLS = {}

ATTENDANCE_TABLE = "attendance"
MENTORS_TABLE = "mentors"
ROSTER_TABLES = ["roster_2026", "roster_2025"]

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_TABLES = True
AUTO_CREATE_DATABASE = False
