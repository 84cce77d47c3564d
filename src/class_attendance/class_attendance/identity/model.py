from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RollInfo:
    """Academic identity derived from a college email local-part."""

    year: str
    program: str
    branch: str
    roll_no: str
    roll_number: str
