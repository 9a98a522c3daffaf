"""Challenge Routes — admin CRUD plus the start/stop toggle.

Invariants:
    - Mutations require the admin role; reads require any authenticated user
    - Responses always carry the recomputed total_steps
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor, require_admin
from devstep.config import get_settings
from devstep.infrastructure.database import get_db
from devstep.schemas.challenge import (
    ChallengeCreate, ChallengeResponse, ChallengeUpdate, ToggleStatusResponse,
)
from devstep.services.challenges import ChallengeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/challenges", tags=["challenges"])


@router.post(
    "", response_model=ChallengeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_challenge(
    body: ChallengeCreate,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a challenge; total_steps = total_distance * conversion_rate."""
    draft = body.to_draft(get_settings().default_conversion_rate)
    challenge = await ChallengeService(db).create(draft)
    return ChallengeResponse.from_model(challenge)


@router.get("", response_model=list[ChallengeResponse])
async def list_challenges(
    _: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db),
):
    challenges = await ChallengeService(db).list()
    return [ChallengeResponse.from_model(c) for c in challenges]


@router.get("/{challenge_id}", response_model=ChallengeResponse)
async def get_challenge(
    challenge_id: UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    challenge = await ChallengeService(db).get(challenge_id)
    return ChallengeResponse.from_model(challenge)


@router.patch("/{challenge_id}", response_model=ChallengeResponse)
async def update_challenge(
    challenge_id: UUID,
    body: ChallengeUpdate,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    challenge = await ChallengeService(db).update(challenge_id, body.to_changes())
    return ChallengeResponse.from_model(challenge)


@router.put("/{challenge_id}/toggle-status", response_model=ToggleStatusResponse)
async def toggle_challenge_status(
    challenge_id: UUID,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Start or end a challenge."""
    challenge = await ChallengeService(db).toggle_status(challenge_id)
    return ToggleStatusResponse.for_state(challenge.is_active)


@router.delete("/{challenge_id}")
async def delete_challenge(
    challenge_id: UUID,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await ChallengeService(db).delete(challenge_id)
    return {"message": "Challenge removed"}
