import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_hub"),
}

# Base of the /join/<pin> deep links encoded in QR codes
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

# Registering as HOC requires this code
HOC_REGISTRATION_SECRET = os.getenv("HOC_REGISTRATION_SECRET", "ACCESS-GRANTED")

SSE_KEEPALIVE_SECONDS = float(os.getenv("SSE_KEEPALIVE_SECONDS", "15"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed a demo HOC and student on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
