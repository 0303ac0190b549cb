import os

SECRET_KEY = "test-secret"

# Tests run against the in-process store; no MySQL server needed.
STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_hub_test"),
}

PUBLIC_BASE_URL = "http://testserver"

HOC_REGISTRATION_SECRET = "test-hoc-secret"

SSE_KEEPALIVE_SECONDS = 0.05

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
