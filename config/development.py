import os

from .config import Config, DB_CONFIG  # noqa: F401

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

PENDING_PUNCH_TTL_SECONDS = Config.PENDING_PUNCH_TTL_SECONDS
REQUIRE_PHOTO = Config.REQUIRE_PHOTO
MAX_ACCURACY_METERS = Config.MAX_ACCURACY_METERS
