"""Join codes for private groups (``XXXX-XXXX``)."""

from __future__ import annotations

import re
import secrets

__all__ = [
    "JOIN_CODE_ALPHABET",
    "generate_join_code",
    "is_valid_join_code_format",
    "normalize_join_code",
]

# Excludes I, O, 0 and 1.
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_FORMAT = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}$")


def generate_join_code() -> str:
    chars = "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(8))
    return f"{chars[:4]}-{chars[4:]}"


def normalize_join_code(code: str) -> str:
    return code.strip().upper()


def is_valid_join_code_format(code: str) -> bool:
    return bool(_FORMAT.match(code))
