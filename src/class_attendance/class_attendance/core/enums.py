from __future__ import annotations

from enum import Enum


class SessionPolicy(str, Enum):
    """How many sessions may be collecting attendance at once."""

    SINGLE_ACTIVE = "single"
    MULTI_ACTIVE = "multi"


class SessionState(str, Enum):
    """Derived lifecycle state of a session (not persisted)."""

    ACTIVE = "ACTIVE"
    SUPERSEDED = "SUPERSEDED"
    ENDED = "ENDED"
