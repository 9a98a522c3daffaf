"""Tests for the aggregation engine — tallies, daily rollups, averages and rankings."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4

from devstep.core.aggregation import (
    TeamTally, average_per_day, challenge_rollup, daily_breakdown, daily_rollup,
    net_deltas_by_team, percent_of, rank_by_total_steps, summarize_steps,
)
from devstep.core.step_ledger import EntryOutcome


@dataclass
class Entry:
    user_id: UUID
    team_id: UUID
    date: date
    steps: int


@dataclass
class FakeTeam:
    id: UUID
    name: str
    total_steps: int


@dataclass
class FakeChallenge:
    total_steps: float


ALICE, BOB = uuid4(), uuid4()
TEAM = uuid4()


def _outcome(team_id: UUID, delta: int) -> EntryOutcome:
    return EntryOutcome(
        entry_id=uuid4(), entry_date=date(2025, 4, 1), steps=0,
        previous_steps=0, delta=delta, team_id=team_id, created=False,
    )


# ─── TeamTally ───────────────────────────────────────────────────

def test_tally_applies_signed_deltas():
    tally = TeamTally(team_id=TEAM, total_steps=10000)
    assert tally.apply_delta(2000) == 12000
    assert tally.apply_delta(-500) == 11500
    assert tally.total_steps == 11500


def test_net_deltas_grouped_per_team():
    other = uuid4()
    deltas = net_deltas_by_team([
        _outcome(TEAM, 3000), _outcome(other, 500), _outcome(TEAM, -1000),
    ])
    assert deltas == {TEAM: 2000, other: 500}


def test_net_deltas_drop_zero_sum_teams():
    assert net_deltas_by_team([_outcome(TEAM, 100), _outcome(TEAM, -100)]) == {}


# ─── Daily rollups ───────────────────────────────────────────────

def test_daily_rollup_sums_per_date_ascending():
    entries = [
        Entry(ALICE, TEAM, date(2025, 4, 2), 1000),
        Entry(BOB, TEAM, date(2025, 4, 1), 2000),
        Entry(ALICE, TEAM, date(2025, 4, 1), 500),
    ]
    days = daily_rollup(entries)
    assert [d.to_dict() for d in days] == [
        {"date": "2025-04-01", "steps": 2500},
        {"date": "2025-04-02", "steps": 1000},
    ]


def test_daily_breakdown_newest_first_with_member_entries():
    entries = [
        Entry(ALICE, TEAM, date(2025, 4, 1), 1000),
        Entry(BOB, TEAM, date(2025, 4, 1), 3000),
        Entry(ALICE, TEAM, date(2025, 4, 3), 700),
    ]
    days = daily_breakdown(entries)
    assert [d.day for d in days] == [date(2025, 4, 3), date(2025, 4, 1)]
    assert days[1].total_steps == 4000
    assert days[1].entries == [
        {"user_id": str(ALICE), "steps": 1000},
        {"user_id": str(BOB), "steps": 3000},
    ]


# ─── Averages and percentages ────────────────────────────────────

def test_average_over_populated_days():
    entries = [
        Entry(ALICE, TEAM, date(2025, 4, 1), 1000),
        Entry(ALICE, TEAM, date(2025, 4, 2), 2000),
    ]
    summary = summarize_steps(entries)
    assert summary.total_steps == 3000
    assert summary.average_steps_per_day == 1500


def test_average_with_no_days_is_zero():
    assert average_per_day(0, 0) == 0
    summary = summarize_steps([])
    assert summary.total_steps == 0
    assert summary.average_steps_per_day == 0
    assert summary.daily_steps == []


def test_average_rounds_half_up():
    assert average_per_day(5, 2) == 3
    assert average_per_day(7, 3) == 2


def test_summary_uses_cached_total_when_given():
    entries = [Entry(ALICE, TEAM, date(2025, 4, 1), 1000)]
    assert summarize_steps(entries, cached_total=4000).total_steps == 4000


def test_percent_of_zero_goal_is_zero():
    assert percent_of(5000, 0) == 0.0


def test_percent_of_goal():
    assert percent_of(400500, 801000) == 50.0


def test_challenge_rollup_sums_team_totals():
    teams = [FakeTeam(uuid4(), "A", 100000), FakeTeam(uuid4(), "B", 300500)]
    rollup = challenge_rollup(FakeChallenge(total_steps=801000), teams)
    assert rollup.total_steps == 400500
    assert rollup.goal_steps == 801000
    assert rollup.percent_complete == 50.0


def test_challenge_rollup_without_teams():
    rollup = challenge_rollup(FakeChallenge(total_steps=801000), [])
    assert rollup.total_steps == 0
    assert rollup.percent_complete == 0.0


# ─── Ranking ─────────────────────────────────────────────────────

def test_rank_descending_by_total():
    teams = [FakeTeam(uuid4(), "A", 10), FakeTeam(uuid4(), "B", 30), FakeTeam(uuid4(), "C", 20)]
    ranked = rank_by_total_steps(teams, key=lambda t: t.total_steps)
    assert [t.name for t in ranked] == ["B", "C", "A"]


def test_rank_ties_keep_input_order():
    teams = [FakeTeam(uuid4(), "A", 10), FakeTeam(uuid4(), "B", 20), FakeTeam(uuid4(), "C", 10)]
    ranked = rank_by_total_steps(teams, key=lambda t: t.total_steps)
    assert [t.name for t in ranked] == ["B", "A", "C"]
