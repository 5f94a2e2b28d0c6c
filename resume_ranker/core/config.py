from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env(name: str, default: str | None = None) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    return default if raw is None else raw.lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from exc


def _env_csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    items = tuple(item.strip() for item in (_env(name) or "").split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    rate_limit: str = "30/minute"
    rate_limit_enabled: bool = True
    upload_rate_limit: str = "10/minute"
    trust_x_forwarded_for: bool = False
    cors_allowed_origins: tuple[str, ...] = field(
        default=("http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000")
    )
    cors_allow_origin_regex: str | None = None
    cors_allow_credentials: bool = False
    scores_db_path: str = "data/resume_scores.db"
    max_upload_bytes: int = 10 * 1024 * 1024


def load_settings() -> Settings:
    defaults = Settings()
    loaded = Settings(
        log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        sentry_dsn=_env("SENTRY_DSN"),
        rate_limit=_env("RATE_LIMIT", defaults.rate_limit),
        rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", defaults.rate_limit_enabled),
        upload_rate_limit=_env("UPLOAD_RATE_LIMIT", defaults.upload_rate_limit),
        trust_x_forwarded_for=_env_flag("TRUST_X_FORWARDED_FOR", defaults.trust_x_forwarded_for),
        cors_allowed_origins=_env_csv("CORS_ALLOWED_ORIGINS", defaults.cors_allowed_origins),
        cors_allow_origin_regex=_env("CORS_ALLOW_ORIGIN_REGEX"),
        cors_allow_credentials=_env_flag("CORS_ALLOW_CREDENTIALS", defaults.cors_allow_credentials),
        scores_db_path=_env("RESUME_SCORES_DB_PATH", defaults.scores_db_path),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
    )
    if loaded.max_upload_bytes <= 0:
        raise RuntimeError("MAX_UPLOAD_BYTES must be a positive integer.")
    return loaded


settings = load_settings()
