import os


def _optional_float(name: str):
    value = os.getenv(name, "").strip()
    return float(value) if value else None


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "cambiar-esta-clave"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "geo_attendance_db")
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    PENDING_PUNCH_TTL_SECONDS = int(os.environ.get("PENDING_PUNCH_TTL_SECONDS", "300"))
    REQUIRE_PHOTO = bool(int(os.environ.get("REQUIRE_PHOTO", "1")))
    MAX_ACCURACY_METERS = _optional_float("MAX_ACCURACY_METERS")


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
    "pool_size": Config.DB_POOL_SIZE,
}
