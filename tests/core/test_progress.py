"""Tests for the progress projector — team fractions, distances and milestone markers."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from devstep.core.domain_types import GeoPoint
from devstep.core.progress import (
    build_map_view, milestone_fraction, project_milestone, project_team, team_fraction,
)


@dataclass
class FakeMilestone:
    name: str
    steps_required: int
    description: str | None = None


@dataclass
class FakeTeam:
    name: str
    total_steps: int
    id: UUID = field(default_factory=uuid4)


@dataclass
class FakeChallenge:
    total_steps: float = 534 * 1500
    total_distance: float = 534
    start_point: GeoPoint = GeoPoint(51.5074, -0.1278)
    end_point: GeoPoint = GeoPoint(55.9533, -3.1883)
    ordered_milestones: list = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)


def test_goal_is_distance_times_rate():
    assert FakeChallenge().total_steps == 801000


def test_halfway_team_progress():
    progress = project_team(FakeChallenge(), FakeTeam("Alpha", 400500))
    assert progress.progress_percent == pytest.approx(50.0)
    assert progress.distance_covered == pytest.approx(267.0)
    assert progress.position.latitude == pytest.approx(53.73035)
    assert progress.position.longitude == pytest.approx(-1.65805)


def test_team_past_goal_clamped_at_end():
    progress = project_team(FakeChallenge(), FakeTeam("Alpha", 900000))
    assert progress.fraction == 1.0
    assert progress.distance_covered == pytest.approx(534.0)
    assert progress.position.latitude == pytest.approx(55.9533)


def test_team_without_steps_sits_at_start():
    progress = project_team(FakeChallenge(), FakeTeam("Alpha", 0))
    assert progress.progress_percent == 0
    assert progress.position == GeoPoint(51.5074, -0.1278)


def test_zero_goal_yields_zero_fraction():
    assert team_fraction(1000, 0) == 0.0
    assert milestone_fraction(1000, 0) == 0.0


def test_milestone_projection():
    milestone = FakeMilestone("Birmingham", 163 * 1500, "Reached Birmingham")
    progress = project_milestone(FakeChallenge(), milestone)
    assert progress.progress_percent == pytest.approx(163 / 534 * 100)
    assert progress.description == "Reached Birmingham"


def test_milestone_past_goal_is_not_clamped():
    progress = project_milestone(FakeChallenge(), FakeMilestone("Beyond", 1_000_000))
    assert progress.progress_percent > 100
    assert progress.position.latitude > 55.9533


def test_map_view_sorts_teams_by_progress():
    teams = [FakeTeam("Slow", 1000), FakeTeam("Fast", 500000), FakeTeam("Mid", 20000)]
    view = build_map_view(FakeChallenge(), teams)
    assert [t.team_name for t in view.teams] == ["Fast", "Mid", "Slow"]


def test_map_view_ties_keep_input_order():
    teams = [FakeTeam("A", 900000), FakeTeam("B", 1000), FakeTeam("C", 850000)]
    view = build_map_view(FakeChallenge(), teams)
    # A and C both clamp to 100%
    assert [t.team_name for t in view.teams] == ["A", "C", "B"]


def test_map_view_keeps_milestone_order():
    challenge = FakeChallenge(ordered_milestones=[
        FakeMilestone("Birmingham", 163 * 1500), FakeMilestone("Leeds", 315 * 1500),
    ])
    view = build_map_view(challenge, [])
    assert [m.name for m in view.milestones] == ["Birmingham", "Leeds"]
    assert view.teams == []
