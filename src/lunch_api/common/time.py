"""Time helpers shared by services and models."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

__all__ = ["utc_now", "normalize_utc", "local_date", "local_time"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def normalize_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local_date(value: datetime, zone: ZoneInfo) -> date:
    return normalize_utc(value).astimezone(zone).date()


def local_time(value: datetime, zone: ZoneInfo) -> time:
    """Wall-clock time of ``value`` in ``zone``, truncated to seconds."""

    return normalize_utc(value).astimezone(zone).time().replace(microsecond=0, tzinfo=None)
