"""Aggregation Engine — rolls ledger entries into team totals and daily/team/challenge summaries.

Invariants:
    - TeamTally.apply_delta is the ONLY mutation of a team total (no ad-hoc recompute)
    - Daily rollups group by calendar date (YYYY-MM-DD), one row per date with >= 1 entry
    - average_per_day divides by populated days only; zero days -> 0, never raises
    - percent_of treats a zero goal as 0.0 instead of dividing by zero
    - Rankings are descending by total steps; ties keep input order (no secondary key)

Design Decisions:
    - Pure functions over ORM rows via StepEntryLike/TeamLike protocols: testable with dataclasses
    - Integer average rounded half-up: matches how the dashboard has always shown it
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Sequence, TypeVar
from uuid import UUID

from devstep.core.domain_types import DATE_FORMAT
from devstep.core.repository_protocols import ChallengeLike, StepEntryLike, TeamLike
from devstep.core.step_ledger import EntryOutcome

T = TypeVar("T")


@dataclass
class TeamTally:
    """Owned running total for one team — mutated only through apply_delta."""
    team_id: UUID
    total_steps: int = 0

    def apply_delta(self, delta: int) -> int:
        self.total_steps += delta
        return self.total_steps


@dataclass(frozen=True)
class DailyTotal:
    day: date
    steps: int

    def to_dict(self) -> dict:
        return {"date": self.day.strftime(DATE_FORMAT), "steps": self.steps}


@dataclass
class DailyBreakdown:
    """One date's team total plus each member's contribution."""
    day: date
    total_steps: int = 0
    entries: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.day.strftime(DATE_FORMAT),
            "total_steps": self.total_steps,
            "entries": self.entries,
        }


@dataclass(frozen=True)
class StepSummary:
    total_steps: int
    average_steps_per_day: int
    daily_steps: list[DailyTotal]


@dataclass(frozen=True)
class ChallengeRollup:
    total_steps: int
    goal_steps: float
    percent_complete: float


def net_deltas_by_team(outcomes: Iterable[EntryOutcome]) -> dict[UUID, int]:
    """Fold per-entry deltas into one signed delta per attributed team (zero deltas dropped)."""
    deltas: dict[UUID, int] = defaultdict(int)
    for outcome in outcomes:
        deltas[outcome.team_id] += outcome.delta
    return {team_id: d for team_id, d in deltas.items() if d != 0}


def daily_rollup(entries: Iterable[StepEntryLike]) -> list[DailyTotal]:
    """Sum steps per calendar date, ascending by date."""
    by_day: dict[date, int] = defaultdict(int)
    for entry in entries:
        by_day[entry.date] += entry.steps
    return [DailyTotal(day=d, steps=by_day[d]) for d in sorted(by_day)]


def daily_breakdown(entries: Iterable[StepEntryLike]) -> list[DailyBreakdown]:
    """Per-date totals with contributing (user, steps) pairs, newest date first."""
    by_day: dict[date, DailyBreakdown] = {}
    for entry in entries:
        bucket = by_day.setdefault(entry.date, DailyBreakdown(day=entry.date))
        bucket.total_steps += entry.steps
        bucket.entries.append({"user_id": str(entry.user_id), "steps": entry.steps})
    return [by_day[d] for d in sorted(by_day, reverse=True)]


def average_per_day(total_steps: int, populated_days: int) -> int:
    """Average over days that have at least one entry. Zero days -> 0."""
    if populated_days <= 0:
        return 0
    return math.floor(total_steps / populated_days + 0.5)


def percent_of(steps: float, goal: float) -> float:
    """steps / goal * 100, with a zero goal read as 0%."""
    if not goal:
        return 0.0
    return steps / goal * 100


def summarize_steps(
    entries: Sequence[StepEntryLike], cached_total: int | None = None,
) -> StepSummary:
    """Total, per-day average and daily rollup for a set of entries.

    cached_total lets team summaries report the denormalized team counter
    instead of re-adding the entries.
    """
    days = daily_rollup(entries)
    total = cached_total if cached_total is not None else sum(e.steps for e in entries)
    return StepSummary(
        total_steps=total,
        average_steps_per_day=average_per_day(total, len(days)),
        daily_steps=days,
    )


def challenge_rollup(
    challenge: ChallengeLike, teams: Iterable[TeamLike],
) -> ChallengeRollup:
    total = sum(t.total_steps for t in teams)
    return ChallengeRollup(
        total_steps=total,
        goal_steps=challenge.total_steps,
        percent_complete=percent_of(total, challenge.total_steps),
    )


def rank_by_total_steps(items: Iterable[T], key: Callable[[T], float]) -> list[T]:
    """Descending by key; equal keys keep their input order."""
    return sorted(items, key=lambda item: -key(item))
