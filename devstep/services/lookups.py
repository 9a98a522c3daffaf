"""Lookups — fetch-or-raise helpers shared by every service.

Invariants:
    - Unknown ids raise NotFoundError (404), never return None to callers
    - populate_existing=True: a reload inside a team lock always sees committed values,
      not whatever the identity map cached before the lock was taken
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.errors import NotFoundError
from devstep.models.challenge import Challenge
from devstep.models.team import Team
from devstep.models.user import User


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id)
        .execution_options(populate_existing=True),
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def get_team_or_404(db: AsyncSession, team_id: UUID) -> Team:
    result = await db.execute(
        select(Team).where(Team.id == team_id)
        .execution_options(populate_existing=True),
    )
    team = result.scalar_one_or_none()
    if not team:
        raise NotFoundError("Team", team_id)
    return team


async def get_challenge_or_404(db: AsyncSession, challenge_id: UUID) -> Challenge:
    result = await db.execute(
        select(Challenge).where(Challenge.id == challenge_id)
        .execution_options(populate_existing=True),
    )
    challenge = result.scalar_one_or_none()
    if not challenge:
        raise NotFoundError("Challenge", challenge_id)
    return challenge
