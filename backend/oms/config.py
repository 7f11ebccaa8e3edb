# backend/oms/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_list(name: str, default: str = "") -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    PRODUCTION = os.environ.get("OMS_ENV", "development").lower() == "production"

    # Flask signs nothing with it directly, but extensions expect it to be set
    SECRET_KEY = os.environ.get("SESSION_SECRET", "dev-session-secret-change-me")

    CSRF_SECRET = os.environ.get("CSRF_SECRET", "dev-csrf-secret-change-me")
    CSRF_ENFORCED = _env_bool("CSRF_ENFORCED", False)

    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ISSUER = os.environ.get("JWT_ISSUER", "oms-api")
    JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "oms-dashboard")
    PHANTOM_TOKEN_TTL = _env_int("PHANTOM_TOKEN_TTL", 15 * 60)

    # SQLite DB stored in backend/instance/oms.sqlite3 unless DATABASE_URL is set
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///oms.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Schema namespace for every table (PostgreSQL); empty means default schema
    DB_SCHEMA = os.environ.get("DB_SCHEMA", "")
    DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 10)
    DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", 5)
    DB_STATEMENT_TIMEOUT_MS = _env_int("DB_STATEMENT_TIMEOUT_MS", 30_000)

    MAX_CONTENT_LENGTH = _env_int("MAX_UPLOAD_SIZE", 8 * 1024 * 1024)

    CORS_ALLOWED_ORIGINS = _env_list(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
    )

    SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "oms_sid")
    SESSION_MAX_AGE_HOURS = _env_int("SESSION_MAX_AGE_HOURS", 24)
    # 0 disables the sliding idle timeout; 30 reproduces the short-lived variant
    SESSION_IDLE_TIMEOUT_MINUTES = _env_int("SESSION_IDLE_TIMEOUT_MINUTES", 0)

    IDENTITY_CACHE_TTL = _env_int("IDENTITY_CACHE_TTL", 300)
    CACHE_MAX_ENTRIES = _env_int("CACHE_MAX_ENTRIES", 1000)
    ORDER_LIST_CACHE_TTL = _env_int("ORDER_LIST_CACHE_TTL", 30)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    @classmethod
    def engine_options(cls) -> dict:
        """Build SQLALCHEMY_ENGINE_OPTIONS from the pool, timeout and schema settings."""
        uri = cls.SQLALCHEMY_DATABASE_URI
        options: dict = {"pool_pre_ping": True}
        if uri.startswith("postgresql"):
            options["pool_size"] = cls.DB_POOL_SIZE
            options["max_overflow"] = cls.DB_MAX_OVERFLOW
            options["connect_args"] = {
                "options": f"-c statement_timeout={cls.DB_STATEMENT_TIMEOUT_MS}"
            }
        if cls.DB_SCHEMA:
            options["execution_options"] = {"schema_translate_map": {None: cls.DB_SCHEMA}}
        return options


class TestConfig(Config):
    TESTING = True
    PRODUCTION = False
    SECRET_KEY = "test-session-secret"
    CSRF_SECRET = "test-csrf-secret"
    CSRF_ENFORCED = False
    JWT_SECRET = "test-jwt-secret-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DB_SCHEMA = ""
    LOG_LEVEL = "DEBUG"
