"""Statistics Routes — getStatistics(scope, id) for users, teams and challenges."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor
from devstep.core.domain_types import StatisticsScope
from devstep.infrastructure.database import get_db
from devstep.schemas.statistics import (
    ChallengeStatistics, TeamStatistics, UserStatistics,
)
from devstep.services.statistics import StatisticsService

router = APIRouter(prefix="/api/v1/statistics", tags=["statistics"])


@router.get("/user/me", response_model=UserStatistics)
async def get_my_statistics(
    actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db),
):
    return await StatisticsService(db).user_statistics(actor.user_id)


@router.get(
    "/{scope}/{target_id}",
    response_model=UserStatistics | TeamStatistics | ChallengeStatistics,
)
async def get_statistics(
    scope: StatisticsScope,
    target_id: UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await StatisticsService(db).for_scope(scope, target_id)
