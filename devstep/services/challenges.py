"""Challenge Administration — create, update, toggle, delete and read challenges.

Invariants:
    - total_steps is always written from core.challenge_rules.compute_total_steps
    - Every create/update validates the FULL resulting draft (not just the changed fields)
    - A challenge referenced by any team is never deleted (CHALLENGE_HAS_TEAMS)
    - Challenge names are unique (DUPLICATE_NAME), also when the race is only caught at commit

Design Decisions:
    - Update = draft_from_model + apply_changes + validate: one validation path for
      create and update
    - Milestones replaced wholesale on update: the admin UI always sends the full list
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.challenge_rules import (
    ChallengeDraft, LocationDraft, MilestoneDraft,
    apply_changes, compute_total_steps, validate_challenge,
)
from devstep.core.errors import ConflictError, ErrorContext
from devstep.models.challenge import Challenge
from devstep.models.milestone import Milestone
from devstep.models.team import Team
from devstep.services.lookups import get_challenge_or_404

logger = logging.getLogger(__name__)


def draft_from_model(challenge: Challenge) -> ChallengeDraft:
    return ChallengeDraft(
        name=challenge.name,
        description=challenge.description,
        start_location=LocationDraft(
            challenge.start_location_name,
            challenge.start_latitude, challenge.start_longitude,
        ),
        end_location=LocationDraft(
            challenge.end_location_name,
            challenge.end_latitude, challenge.end_longitude,
        ),
        total_distance=challenge.total_distance,
        conversion_rate=challenge.conversion_rate,
        start_date=challenge.start_date,
        end_date=challenge.end_date,
        max_team_size=challenge.max_team_size,
        min_team_size=challenge.min_team_size,
        is_active=challenge.is_active,
        milestones=tuple(
            MilestoneDraft(
                name=m.name, steps_required=m.steps_required,
                latitude=m.latitude, longitude=m.longitude,
                description=m.description,
            )
            for m in challenge.ordered_milestones
        ),
    )


def _write_draft(challenge: Challenge, draft: ChallengeDraft) -> None:
    """Copy a validated draft onto the ORM row, recomputing total_steps."""
    challenge.name = draft.name
    challenge.description = draft.description
    challenge.start_location_name = draft.start_location.name
    challenge.start_latitude = draft.start_location.latitude
    challenge.start_longitude = draft.start_location.longitude
    challenge.end_location_name = draft.end_location.name
    challenge.end_latitude = draft.end_location.latitude
    challenge.end_longitude = draft.end_location.longitude
    challenge.total_distance = draft.total_distance
    challenge.conversion_rate = draft.conversion_rate
    challenge.total_steps = compute_total_steps(
        draft.total_distance, draft.conversion_rate,
    )
    challenge.start_date = draft.start_date
    challenge.end_date = draft.end_date
    challenge.is_active = draft.is_active
    challenge.min_team_size = draft.min_team_size
    challenge.max_team_size = draft.max_team_size


def _build_milestones(draft: ChallengeDraft) -> list[Milestone]:
    return [
        Milestone(
            position=i, name=m.name, description=m.description,
            steps_required=m.steps_required,
            latitude=m.latitude, longitude=m.longitude,
        )
        for i, m in enumerate(draft.milestones)
    ]


class ChallengeService:
    """Admin operations on challenges."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, draft: ChallengeDraft) -> Challenge:
        error = validate_challenge(draft)
        if error:
            raise error
        await self._ensure_name_available(draft.name)

        challenge = Challenge()
        _write_draft(challenge, draft)
        challenge.milestones = _build_milestones(draft)
        self.db.add(challenge)
        await self._commit_named(draft.name)
        logger.info(
            f"Challenge '{challenge.name}' created "
            f"({challenge.total_steps:.0f} steps goal)",
            extra={"challenge_id": challenge.id},
        )
        return await get_challenge_or_404(self.db, challenge.id)

    async def list(self) -> list[Challenge]:
        result = await self.db.execute(
            select(Challenge).order_by(Challenge.start_date.desc()),
        )
        return list(result.scalars().all())

    async def get(self, challenge_id: UUID) -> Challenge:
        return await get_challenge_or_404(self.db, challenge_id)

    async def update(self, challenge_id: UUID, changes: dict) -> Challenge:
        challenge = await get_challenge_or_404(self.db, challenge_id)
        draft = apply_changes(draft_from_model(challenge), changes)
        error = validate_challenge(draft)
        if error:
            error.context.challenge_id = challenge_id
            raise error
        if draft.name != challenge.name:
            await self._ensure_name_available(draft.name)

        if "milestones" in changes:
            challenge.milestones.clear()
            await self.db.flush()
            challenge.milestones.extend(_build_milestones(draft))
        _write_draft(challenge, draft)
        await self._commit_named(draft.name)
        logger.info(
            f"Challenge '{challenge.name}' updated: {sorted(changes)}",
            extra={"challenge_id": challenge_id},
        )
        return await get_challenge_or_404(self.db, challenge_id)

    async def toggle_status(self, challenge_id: UUID) -> Challenge:
        challenge = await get_challenge_or_404(self.db, challenge_id)
        challenge.is_active = not challenge.is_active
        await self.db.commit()
        logger.info(
            f"Challenge '{challenge.name}' is_active={challenge.is_active}",
            extra={"challenge_id": challenge_id},
        )
        return challenge

    async def delete(self, challenge_id: UUID) -> None:
        challenge = await get_challenge_or_404(self.db, challenge_id)
        team_count = (await self.db.execute(
            select(func.count()).select_from(Team)
            .where(Team.challenge_id == challenge_id),
        )).scalar_one()
        if team_count > 0:
            raise ConflictError(
                "Cannot delete challenge with associated teams",
                "CHALLENGE_HAS_TEAMS",
                ErrorContext(challenge_id=challenge_id),
            )
        await self.db.delete(challenge)
        await self.db.commit()
        logger.info(
            f"Challenge '{challenge.name}' deleted",
            extra={"challenge_id": challenge_id},
        )

    async def _ensure_name_available(self, name: str) -> None:
        taken = (await self.db.execute(
            select(Challenge.id).where(Challenge.name == name),
        )).scalar_one_or_none()
        if taken:
            raise _duplicate_challenge_name(name)

    async def _commit_named(self, name: str) -> None:
        """Commit, reporting a unique-name race as DUPLICATE_NAME."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _duplicate_challenge_name(name)


def _duplicate_challenge_name(name: str) -> ConflictError:
    return ConflictError(
        f"Challenge name '{name}' is already taken", "DUPLICATE_NAME",
    )
