"""Roster Rules — membership invariants checked before a roster write.

Invariants:
    - A user belongs to at most one team at a time
    - Roster size never exceeds challenge.max_team_size
    - Removal only requires current membership; min_team_size is NOT enforced on removal

Design Decisions:
    - Pure checks return the error (or None); the shell repeats the same conditions
      as conditional UPDATEs so a concurrent writer cannot slip past the check
"""

from uuid import UUID

from devstep.core.errors import (
    AlreadyInTeamError, ConflictError, ErrorContext, NotAMemberError, TeamFullError,
)


def check_can_add_member(
    user_id: UUID,
    user_team_id: UUID | None,
    roster_size: int,
    max_team_size: int,
    context: ErrorContext | None = None,
) -> ConflictError | None:
    """AlreadyInTeam takes precedence over TeamFull."""
    if user_team_id is not None:
        return AlreadyInTeamError(user_id, context)
    if roster_size >= max_team_size:
        return TeamFullError(max_team_size, context)
    return None


def check_can_remove_member(
    user_id: UUID,
    user_team_id: UUID | None,
    team_id: UUID,
    context: ErrorContext | None = None,
) -> NotAMemberError | None:
    if user_team_id != team_id:
        return NotAMemberError(user_id, team_id, context)
    return None


def is_below_minimum(roster_size: int, min_team_size: int) -> bool:
    """Informational only — a team may legally drop below its minimum."""
    return roster_size < min_team_size
