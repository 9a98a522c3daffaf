"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Core functions accept these structural types, so ORM rows and plain
      dataclasses in tests are interchangeable

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Read-only attribute contracts: core never mutates what it is handed,
      mutations go through services
"""

from datetime import date
from typing import Protocol, Sequence
from uuid import UUID

from devstep.core.domain_types import GeoPoint


class MilestoneLike(Protocol):
    """Structural contract for a challenge milestone."""
    name: str
    description: str | None
    steps_required: int


class ChallengeLike(Protocol):
    """Structural contract for Challenge objects passed to core functions."""
    id: UUID
    name: str
    total_distance: float
    conversion_rate: float
    total_steps: float
    start_date: date
    end_date: date
    is_active: bool
    min_team_size: int
    max_team_size: int

    @property
    def start_point(self) -> GeoPoint: ...

    @property
    def end_point(self) -> GeoPoint: ...

    @property
    def ordered_milestones(self) -> Sequence[MilestoneLike]: ...


class TeamLike(Protocol):
    """Structural contract for Team objects passed to core functions."""
    id: UUID
    name: str
    total_steps: int


class StepEntryLike(Protocol):
    """Structural contract for ledger rows passed to aggregation."""
    user_id: UUID
    team_id: UUID
    date: date
    steps: int
