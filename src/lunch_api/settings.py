"""Lunch API settings (conventional Pydantic v2)."""

from __future__ import annotations

from datetime import time, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

# ---- Defaults ---------------------------------------------------------------

DEFAULT_STORAGE_ROOT = Path("./data")
DEFAULT_DB_FILENAME = "lunch.sqlite"
DEFAULT_SQLITE_PATH = DEFAULT_STORAGE_ROOT / "db" / DEFAULT_DB_FILENAME
DEFAULT_VOTING_START = time(9, 0)
DEFAULT_VOTING_END = time(11, 0)
DEFAULT_GROUP_MIN_DURATION = timedelta(minutes=15)
DEFAULT_GROUP_MAX_DURATION = timedelta(hours=24)

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


# ---- Helpers ----------------------------------------------------------------

def _parse_duration(value: Any, *, field_name: str) -> timedelta:
    """Accept seconds (int/float/str) or '60s'/'5m'/'1h'/'14d'."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError(f"{field_name} must not be blank")
        try:
            seconds = float(s)
        except ValueError:
            unit = s[-1].lower()
            num = s[:-1].strip()
            if unit not in _UNIT_SECONDS or not num:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from None
            try:
                seconds = float(num) * _UNIT_SECONDS[unit]
            except ValueError as exc:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from exc
    else:
        raise TypeError(f"{field_name} must be number, duration string, or timedelta")
    if seconds <= 0:
        raise ValueError(f"{field_name} must be > 0 seconds")
    return timedelta(seconds=seconds)


def _resolve_path(value: Path | str | None, *, default: Path) -> Path:
    """Expand, absolutize, and resolve a configurable path."""

    if value in (None, ""):
        candidate = default
    elif isinstance(value, Path):
        candidate = value
    else:
        candidate = Path(str(value).strip())
    return candidate.expanduser().resolve()


# ---- Settings ---------------------------------------------------------------

class Settings(BaseSettings):
    """Application settings loaded from LUNCH_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LUNCH_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    app_name: str = "Lunch API"
    app_version: str = "0.1.0"
    debug: bool = False
    logging_level: str = "INFO"

    # Database
    database_dsn: str | None = None
    database_echo: bool = False
    database_pool_size: int = Field(5, ge=1)  # ignored by sqlite
    database_max_overflow: int = Field(10, ge=0)
    database_pool_timeout: int = Field(30, gt=0)
    database_sqlite_busy_timeout_ms: int = Field(30_000, ge=0)
    database_sqlite_begin_mode: str = "DEFERRED"
    database_create_all: bool = True

    # Voting
    timezone: str = "UTC"
    voting_start_time: time = DEFAULT_VOTING_START
    voting_end_time: time = DEFAULT_VOTING_END

    # Groups & carts
    group_min_duration: timedelta = Field(default=DEFAULT_GROUP_MIN_DURATION)
    group_max_duration: timedelta = Field(default=DEFAULT_GROUP_MAX_DURATION)
    cart_max_quantity: int = Field(99, ge=1)
    join_code_max_attempts: int = Field(10, ge=1)

    # Talabat delivery API
    talabat_api_url: str = "https://api.talabat.com/v1"
    talabat_api_key: SecretStr | None = None
    talabat_country: str = "BH"
    talabat_timeout_seconds: float = Field(30.0, gt=0)

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        s = str(v or "").strip().upper()
        return s or "INFO"

    @field_validator("database_sqlite_begin_mode", mode="before")
    @classmethod
    def _v_begin_mode(cls, v: Any) -> str:
        s = str(v or "").strip().upper() or "DEFERRED"
        if s not in {"DEFERRED", "IMMEDIATE", "EXCLUSIVE"}:
            raise ValueError("LUNCH_DATABASE_SQLITE_BEGIN_MODE must be DEFERRED, IMMEDIATE or EXCLUSIVE")
        return s

    @field_validator("timezone", mode="before")
    @classmethod
    def _v_timezone(cls, v: Any) -> str:
        s = str(v or "").strip() or "UTC"
        try:
            ZoneInfo(s)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"LUNCH_TIMEZONE {s!r} is not a known IANA timezone") from exc
        return s

    @field_validator("group_min_duration", "group_max_duration", mode="before")
    @classmethod
    def _v_durations(cls, v: Any, info: ValidationInfo) -> timedelta:
        return _parse_duration(v, field_name=info.field_name)

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        if self.voting_end_time <= self.voting_start_time:
            raise ValueError("LUNCH_VOTING_END_TIME must be later than LUNCH_VOTING_START_TIME")
        if self.group_max_duration < self.group_min_duration:
            raise ValueError("LUNCH_GROUP_MAX_DURATION must be >= LUNCH_GROUP_MIN_DURATION")

        if not self.database_dsn:
            sqlite = _resolve_path(DEFAULT_SQLITE_PATH, default=DEFAULT_SQLITE_PATH)
            self.database_dsn = f"sqlite+aiosqlite:///{sqlite.as_posix()}"

        url = make_url(self.database_dsn)
        backend = url.get_backend_name()
        if backend == "sqlite" and url.drivername != "sqlite+aiosqlite":
            url = url.set(drivername="sqlite+aiosqlite")
        elif backend == "postgresql" and url.drivername != "postgresql+asyncpg":
            url = url.set(drivername="postgresql+asyncpg")
        self.database_dsn = url.render_as_string(hide_password=False)
        return self

    # ---- Convenience ----

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def talabat_configured(self) -> bool:
        key = self.talabat_api_key.get_secret_value() if self.talabat_api_key else ""
        return bool(key.strip() and self.talabat_api_url.strip())


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "DEFAULT_DB_FILENAME",
    "Settings",
    "get_settings",
    "reload_settings",
]
