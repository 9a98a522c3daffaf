"""Statistics Service — user, team and challenge summaries over the step ledger.

Invariants:
    - Team and challenge totals come from the cached team.total_steps counter;
      only the daily breakdown reads ledger rows
    - Challenge statistics load all member-team entries in ONE query
    - Teams ranked by descending total steps, ties in team creation order
"""

import logging
from collections import defaultdict
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.aggregation import (
    challenge_rollup, percent_of, rank_by_total_steps, summarize_steps,
)
from devstep.core.domain_types import StatisticsScope
from devstep.models.step_entry import StepEntry
from devstep.models.team import Team
from devstep.schemas.statistics import (
    ChallengeStatistics, TeamStatistics, UserStatistics, daily_steps_out,
)
from devstep.services.lookups import (
    get_challenge_or_404, get_team_or_404, get_user_or_404,
)

logger = logging.getLogger(__name__)


def _team_statistics(team: Team, entries: list[StepEntry], goal_steps: float) -> TeamStatistics:
    summary = summarize_steps(entries, cached_total=team.total_steps)
    return TeamStatistics(
        team_id=team.id,
        team_name=team.name,
        total_steps=summary.total_steps,
        average_steps_per_day=summary.average_steps_per_day,
        percent_of_goal=percent_of(team.total_steps, goal_steps),
        daily_steps=daily_steps_out(summary),
    )


class StatisticsService:
    """Read-only aggregate views."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def for_scope(
        self, scope: StatisticsScope, target_id: UUID,
    ) -> UserStatistics | TeamStatistics | ChallengeStatistics:
        if scope == StatisticsScope.USER:
            return await self.user_statistics(target_id)
        if scope == StatisticsScope.TEAM:
            return await self.team_statistics(target_id)
        return await self.challenge_statistics(target_id)

    async def user_statistics(self, user_id: UUID) -> UserStatistics:
        await get_user_or_404(self.db, user_id)
        result = await self.db.execute(
            select(StepEntry).where(StepEntry.user_id == user_id)
            .order_by(StepEntry.date),
        )
        summary = summarize_steps(list(result.scalars().all()))
        return UserStatistics(
            user_id=user_id,
            total_steps=summary.total_steps,
            average_steps_per_day=summary.average_steps_per_day,
            daily_steps=daily_steps_out(summary),
        )

    async def team_statistics(self, team_id: UUID) -> TeamStatistics:
        team = await get_team_or_404(self.db, team_id)
        result = await self.db.execute(
            select(StepEntry).where(StepEntry.team_id == team_id)
            .order_by(StepEntry.date),
        )
        goal = team.challenge.total_steps if team.challenge else 0
        return _team_statistics(team, list(result.scalars().all()), goal)

    async def challenge_statistics(self, challenge_id: UUID) -> ChallengeStatistics:
        challenge = await get_challenge_or_404(self.db, challenge_id)
        teams = list(challenge.teams)

        by_team: dict[UUID, list[StepEntry]] = defaultdict(list)
        if teams:
            result = await self.db.execute(
                select(StepEntry)
                .where(StepEntry.team_id.in_([t.id for t in teams]))
                .order_by(StepEntry.date),
            )
            for entry in result.scalars().all():
                by_team[entry.team_id].append(entry)

        team_stats = rank_by_total_steps(
            (_team_statistics(t, by_team[t.id], challenge.total_steps) for t in teams),
            key=lambda s: s.total_steps,
        )
        rollup = challenge_rollup(challenge, teams)
        return ChallengeStatistics(
            challenge_id=challenge.id,
            challenge_name=challenge.name,
            total_steps=rollup.total_steps,
            goal_steps=rollup.goal_steps,
            percent_complete=rollup.percent_complete,
            team_statistics=team_stats,
        )
