"""DB package exports."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPrimaryKeyMixin, metadata
from .database import (
    Database,
    DatabaseConfig,
    create_schema,
    db,
    get_db_session,
    keep_on_domain_error,
    session_scope,
)
from .types import UTCDateTime, status_enum

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "status_enum",
    "UTCDateTime",
    "Database",
    "DatabaseConfig",
    "create_schema",
    "db",
    "session_scope",
    "get_db_session",
    "keep_on_domain_error",
]
