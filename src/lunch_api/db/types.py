"""Column types shared by the lunch models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import DateTime, TypeDecorator

__all__ = ["UTCDateTime", "status_enum"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class UTCDateTime(TypeDecorator):
    """Aware datetimes in, aware UTC datetimes out.

    SQLite drops the offset on storage, so naive values read back are UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        return _as_utc(value) if isinstance(value, datetime) else value

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        return _as_utc(value) if isinstance(value, datetime) else value


def status_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """String-backed enum column storing member values (``"unpaid"``, not ``"UNPAID"``)."""

    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda cls: [member.value for member in cls],
    )
