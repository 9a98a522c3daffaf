"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId and TeamId wrap UUIDs at the identity and locking seams
    - GeoPoint is an immutable (latitude, longitude) pair in decimal degrees
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers for ids: zero runtime cost, full type-checker support
    - Frozen dataclass for GeoPoint: hashable, safe to share between projections
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TeamId = NewType("TeamId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

DEFAULT_CONVERSION_RATE: int = 1300   # steps per km
DATE_FORMAT: str = "%Y-%m-%d"


@dataclass(frozen=True)
class GeoPoint:
    """A coordinate pair in decimal degrees."""
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


# ─── Enums ───────────────────────────────────────────────────────

class StatisticsScope(str, Enum):
    """Aggregation scopes exposed by getStatistics."""
    USER = "user"
    TEAM = "team"
    CHALLENGE = "challenge"


class UserRole(str, Enum):
    """Role resolved by the identity layer for the acting user."""
    MEMBER = "member"
    ADMIN = "admin"
