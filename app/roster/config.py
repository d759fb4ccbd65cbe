import os
from dataclasses import dataclass

DEFAULT_CHARACTERS_SOURCE_URL = (
    "https://raw.githubusercontent.com/MounirAbdellaoui/Cod_Characters/refs/heads/main/characters/characters.json"
)


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    db_pool_size: int
    db_max_overflow: int
    db_pool_recycle_seconds: int

    characters_source_url: str
    emblems_source_url: str
    source_timeout_seconds: int

    admin_password: str
    user_password: str
    bootstrap_on_start: bool

    session_cookie_secure: bool
    session_lifetime_hours: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///roster.db"),
        db_pool_size=_getenv_int("DB_POOL_SIZE", 5),
        db_max_overflow=_getenv_int("DB_MAX_OVERFLOW", 10),
        db_pool_recycle_seconds=_getenv_int("DB_POOL_RECYCLE_SECONDS", 1800),
        characters_source_url=_getenv("CHARACTERS_SOURCE_URL", DEFAULT_CHARACTERS_SOURCE_URL),
        emblems_source_url=_getenv("EMBLEMS_SOURCE_URL", ""),
        source_timeout_seconds=_getenv_int("SOURCE_TIMEOUT_SECONDS", 30),
        admin_password=os.environ.get("ADMIN_PASSWORD") or "admin123",
        user_password=os.environ.get("USER_PASSWORD") or "user123",
        bootstrap_on_start=_getenv_bool("BOOTSTRAP_ON_START", True),
        # Off by default so the dashboard works over plain HTTP in development.
        session_cookie_secure=_getenv_bool("SESSION_COOKIE_SECURE", False),
        session_lifetime_hours=_getenv_int("SESSION_LIFETIME_HOURS", 24),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "DB_POOL_SIZE": s.db_pool_size,
        "DB_MAX_OVERFLOW": s.db_max_overflow,
        "DB_POOL_RECYCLE_SECONDS": s.db_pool_recycle_seconds,
        "CHARACTERS_SOURCE_URL": s.characters_source_url,
        "EMBLEMS_SOURCE_URL": s.emblems_source_url,
        "SOURCE_TIMEOUT_SECONDS": s.source_timeout_seconds,
        "ADMIN_PASSWORD": s.admin_password,
        "USER_PASSWORD": s.user_password,
        "BOOTSTRAP_ON_START": s.bootstrap_on_start,
        "SESSION_LIFETIME_HOURS": s.session_lifetime_hours,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": s.session_cookie_secure,
    }
