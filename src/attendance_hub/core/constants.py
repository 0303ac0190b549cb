"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

PIN_LENGTH = 6
MAX_PIN_ATTEMPTS = 10

# Table names double as change-feed channel names.
PROFILES_TABLE = "profiles"
SESSIONS_TABLE = "active_sessions"
ATTENDANCE_TABLE = "attendance"
STORE_TABLES = (PROFILES_TABLE, SESSIONS_TABLE, ATTENDANCE_TABLE)

MIN_LEVEL = 100
MAX_LEVEL = 900

SHARE_SUMMARY_LIMIT = 8
DEFAULT_SSE_KEEPALIVE_SECONDS = 15
