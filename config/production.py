import os

from .config import Config, DB_CONFIG  # noqa: F401

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = Config.AUTO_INIT_DB

PENDING_PUNCH_TTL_SECONDS = Config.PENDING_PUNCH_TTL_SECONDS
REQUIRE_PHOTO = Config.REQUIRE_PHOTO
MAX_ACCURACY_METERS = Config.MAX_ACCURACY_METERS
