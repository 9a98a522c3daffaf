"""Roster Service — team creation and membership changes.

Invariants:
    - add/remove run under the team's lock and commit roster + user reference together
    - The capacity and single-team checks are repeated as conditional UPDATEs;
      a conditional UPDATE that matches no row rolls back the whole change
    - Dropping below min_team_size is allowed (logged, not rejected)
    - Team names are unique; a commit-time duplicate is reported as DUPLICATE_NAME

Design Decisions:
    - users.team_id is the roster; teams.member_count is the counter the
      conditional capacity check runs against
    - synchronize_session=False + reload: the response always reflects committed rows
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.errors import (
    AlreadyInTeamError, ConflictError, ErrorContext, NotAMemberError,
    StateError, TeamFullError,
)
from devstep.core.roster import (
    check_can_add_member, check_can_remove_member, is_below_minimum,
)
from devstep.infrastructure.team_locks import team_locks
from devstep.models.team import Team
from devstep.models.user import User
from devstep.services.lookups import (
    get_challenge_or_404, get_team_or_404, get_user_or_404,
)

logger = logging.getLogger(__name__)


class RosterService:
    """Team lifecycle and membership operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_team(
        self, name: str, description: str | None, challenge_id: UUID,
    ) -> Team:
        await get_challenge_or_404(self.db, challenge_id)
        ctx = ErrorContext(challenge_id=challenge_id)
        await self._ensure_team_name_available(name, ctx)
        team = Team(
            name=name, description=description, challenge_id=challenge_id,
            total_steps=0, member_count=0,
        )
        self.db.add(team)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _duplicate_team_name(name, ctx)
        logger.info(
            f"Team '{name}' created",
            extra={"team_id": team.id, "challenge_id": challenge_id},
        )
        return await get_team_or_404(self.db, team.id)

    async def list_teams(self) -> list[Team]:
        result = await self.db.execute(select(Team).order_by(Team.name))
        return list(result.scalars().all())

    async def get_team(self, team_id: UUID) -> Team:
        return await get_team_or_404(self.db, team_id)

    async def add_member(self, team_id: UUID, user_id: UUID) -> Team:
        async with team_locks([team_id]):
            team = await get_team_or_404(self.db, team_id)
            user = await get_user_or_404(self.db, user_id)
            ctx = ErrorContext(
                user_id=user_id, team_id=team_id, challenge_id=team.challenge_id,
            )
            challenge = team.challenge
            if challenge is None:
                raise StateError(
                    "Team has no associated challenge",
                    "TEAM_WITHOUT_CHALLENGE", ctx,
                )
            error = check_can_add_member(
                user.id, user.team_id, team.member_count,
                challenge.max_team_size, ctx,
            )
            if error:
                raise error

            claimed = await self.db.execute(
                update(User)
                .where(User.id == user_id, User.team_id.is_(None))
                .values(team_id=team_id)
                .execution_options(synchronize_session=False),
            )
            if claimed.rowcount != 1:
                await self.db.rollback()
                raise AlreadyInTeamError(user_id, ctx)

            grown = await self.db.execute(
                update(Team)
                .where(
                    Team.id == team_id,
                    Team.member_count < challenge.max_team_size,
                )
                .values(member_count=Team.member_count + 1)
                .execution_options(synchronize_session=False),
            )
            if grown.rowcount != 1:
                await self.db.rollback()
                raise TeamFullError(challenge.max_team_size, ctx)

            await self.db.commit()

        logger.info(
            f"User '{user.username}' added to team '{team.name}'",
            extra={"user_id": user_id, "team_id": team_id},
        )
        return await get_team_or_404(self.db, team_id)

    async def remove_member(self, team_id: UUID, user_id: UUID) -> Team:
        async with team_locks([team_id]):
            team = await get_team_or_404(self.db, team_id)
            user = await get_user_or_404(self.db, user_id)
            ctx = ErrorContext(
                user_id=user_id, team_id=team_id, challenge_id=team.challenge_id,
            )
            error = check_can_remove_member(user.id, user.team_id, team.id, ctx)
            if error:
                raise error

            released = await self.db.execute(
                update(User)
                .where(User.id == user_id, User.team_id == team_id)
                .values(team_id=None)
                .execution_options(synchronize_session=False),
            )
            if released.rowcount != 1:
                await self.db.rollback()
                raise NotAMemberError(user_id, team_id, ctx)

            await self.db.execute(
                update(Team)
                .where(Team.id == team_id, Team.member_count > 0)
                .values(member_count=Team.member_count - 1)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()

        team = await get_team_or_404(self.db, team_id)
        if team.challenge and is_below_minimum(
            team.member_count, team.challenge.min_team_size,
        ):
            logger.warning(
                f"Team '{team.name}' is below minimum size "
                f"({team.member_count}/{team.challenge.min_team_size})",
                extra={"team_id": team_id},
            )
        logger.info(
            f"User '{user.username}' removed from team '{team.name}'",
            extra={"user_id": user_id, "team_id": team_id},
        )
        return team

    async def _ensure_team_name_available(self, name: str, ctx: ErrorContext) -> None:
        taken = (await self.db.execute(
            select(Team.id).where(Team.name == name),
        )).scalar_one_or_none()
        if taken:
            raise _duplicate_team_name(name, ctx)


def _duplicate_team_name(name: str, ctx: ErrorContext) -> ConflictError:
    return ConflictError(
        f"Team name '{name}' is already taken", "DUPLICATE_NAME", ctx,
    )
