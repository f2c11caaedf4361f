from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


def looks_like_placeholder(value: str | None) -> bool:
    lower = (value or "").strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def _get_secret(name: str) -> str | None:
    value = (_get_env(name) or "").strip()
    if not value or looks_like_placeholder(value):
        return None
    return value


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    jwt_secret: str
    jwt_algorithm: str
    jwt_expires_days: int
    jules_api_key: str | None
    jules_base_url: str
    jules_timeout_s: float
    openai_api_key: str | None
    openai_base_url: str | None
    openai_model: str
    openai_timeout_s: float
    openai_max_retries: int
    provider_attempt_timeout_s: float
    users_db_path: str
    history_db_path: str
    history_max_entries: int
    history_preview_chars: int
    analytics_enabled: bool
    analytics_db_path: str
    analytics_retention_days: int
    max_upload_mb: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    jwt_secret=_get_env("JWT_SECRET", "dev-secret-change-in-production") or "dev-secret-change-in-production",
    jwt_algorithm=_get_env("JWT_ALGORITHM", "HS256") or "HS256",
    jwt_expires_days=_get_env_int("JWT_EXPIRES_DAYS", 7),
    jules_api_key=_get_secret("JULES_API_KEY"),
    jules_base_url=_get_env("JULES_BASE_URL", "https://jules.googleapis.com/v1alpha") or "https://jules.googleapis.com/v1alpha",
    jules_timeout_s=_get_env_float("JULES_TIMEOUT_S", 30.0),
    openai_api_key=_get_secret("OPENAI_API_KEY"),
    openai_base_url=_get_env("OPENAI_BASE_URL"),
    openai_model=_get_env("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    openai_timeout_s=_get_env_float("OPENAI_TIMEOUT_S", 30.0),
    openai_max_retries=_get_env_int("OPENAI_MAX_RETRIES", 2),
    provider_attempt_timeout_s=_get_env_float("PROVIDER_ATTEMPT_TIMEOUT_S", 45.0),
    users_db_path=_get_env("USERS_DB_PATH", "data/users.db") or "data/users.db",
    history_db_path=_get_env("HISTORY_DB_PATH", "data/history.db") or "data/history.db",
    history_max_entries=_get_env_int("HISTORY_MAX_ENTRIES", 50),
    history_preview_chars=_get_env_int("HISTORY_PREVIEW_CHARS", 500),
    analytics_enabled=_get_env_bool("ANALYTICS_ENABLED", True),
    analytics_db_path=_get_env("ANALYTICS_DB_PATH", "data/analytics.db") or "data/analytics.db",
    analytics_retention_days=_get_env_int("ANALYTICS_RETENTION_DAYS", 180),
    max_upload_mb=_get_env_int("MAX_UPLOAD_MB", 10),
)

if settings.history_max_entries < 1:
    raise RuntimeError("HISTORY_MAX_ENTRIES must be at least 1.")
