"""Primary key generation for lunch records."""

from __future__ import annotations

import uuid
from typing import Annotated

from pydantic import Field

__all__ = ["UUIDStr", "generate_uuid7"]

UUIDStr = Annotated[uuid.UUID, Field(description="Record id (time-ordered UUID).")]

# uuid.uuid7 ships with Python 3.14; older interpreters get random ids.
_new_id = getattr(uuid, "uuid7", uuid.uuid4)


def generate_uuid7() -> uuid.UUID:
    return _new_id()
