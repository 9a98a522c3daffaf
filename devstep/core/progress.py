"""Challenge Progress Projector — turns team totals into map positions and distances.

Invariants:
    - Team fraction = min(1, team.total_steps / challenge.total_steps); zero goal -> 0
    - distance_covered = fraction * challenge.total_distance
    - Milestone fraction = steps_required / challenge.total_steps, NOT clamped
    - Teams sorted by descending progress, ties in input order

Design Decisions:
    - Returns frozen dataclasses, serialized by the route: projector never shapes JSON
    - Milestones past the goal extrapolate beyond the end point instead of raising,
      so bad challenge data is visible on the map
"""

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from devstep.core.domain_types import GeoPoint
from devstep.core.geo import interpolate_position
from devstep.core.repository_protocols import ChallengeLike, MilestoneLike, TeamLike


@dataclass(frozen=True)
class TeamProgress:
    team_id: UUID
    team_name: str
    total_steps: int
    fraction: float
    distance_covered: float
    position: GeoPoint

    @property
    def progress_percent(self) -> float:
        return self.fraction * 100


@dataclass(frozen=True)
class MilestoneProgress:
    name: str
    description: str | None
    steps_required: int
    fraction: float
    position: GeoPoint

    @property
    def progress_percent(self) -> float:
        return self.fraction * 100


@dataclass(frozen=True)
class MapView:
    challenge: ChallengeLike
    teams: list[TeamProgress]
    milestones: list[MilestoneProgress]


def team_fraction(team_steps: float, goal_steps: float) -> float:
    if goal_steps <= 0:
        return 0.0
    return min(1.0, team_steps / goal_steps)


def milestone_fraction(steps_required: float, goal_steps: float) -> float:
    if goal_steps <= 0:
        return 0.0
    return steps_required / goal_steps


def project_team(challenge: ChallengeLike, team: TeamLike) -> TeamProgress:
    fraction = team_fraction(team.total_steps, challenge.total_steps)
    return TeamProgress(
        team_id=team.id,
        team_name=team.name,
        total_steps=team.total_steps,
        fraction=fraction,
        distance_covered=fraction * challenge.total_distance,
        position=interpolate_position(
            challenge.start_point, challenge.end_point, fraction,
        ),
    )


def project_milestone(
    challenge: ChallengeLike, milestone: MilestoneLike,
) -> MilestoneProgress:
    fraction = milestone_fraction(milestone.steps_required, challenge.total_steps)
    return MilestoneProgress(
        name=milestone.name,
        description=milestone.description,
        steps_required=milestone.steps_required,
        fraction=fraction,
        position=interpolate_position(
            challenge.start_point, challenge.end_point, fraction, clamp=False,
        ),
    )


def build_map_view(challenge: ChallengeLike, teams: Iterable[TeamLike]) -> MapView:
    """Project every team and milestone of a challenge. Pure, no IO."""
    projected = [project_team(challenge, t) for t in teams]
    projected.sort(key=lambda p: -p.fraction)
    return MapView(
        challenge=challenge,
        teams=projected,
        milestones=[
            project_milestone(challenge, m) for m in challenge.ordered_milestones
        ],
    )
