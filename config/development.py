import os

from config import device_sync_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "org_manager"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed settings and demo users on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Shared key punch clocks send as X-Device-Key; empty disables the check
DEVICE_API_KEY = os.getenv("DEVICE_API_KEY", "")

# Optimistic-lock retries for asset assign/return
ASSET_WRITE_RETRIES = int(os.getenv("ASSET_WRITE_RETRIES", "3"))

DEVICE_SYNC = device_sync_from_env()
