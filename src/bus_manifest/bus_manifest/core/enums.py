from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles carried in the bearer token."""

    ADMIN = "admin"
    DRIVER = "driver"
    ASSISTANT = "assistant"


class ManifestStatus(str, Enum):
    """Kind of scan stored on a manifest record."""

    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
