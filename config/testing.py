from .config import DB_CONFIG  # noqa: F401

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

PENDING_PUNCH_TTL_SECONDS = 300
REQUIRE_PHOTO = True
MAX_ACCURACY_METERS = None
