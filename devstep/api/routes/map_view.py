"""Map Route — team and milestone positions for one challenge."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor
from devstep.infrastructure.database import get_db
from devstep.schemas.map_view import MapViewResponse
from devstep.services.map_view import MapViewService

router = APIRouter(prefix="/api/v1/map", tags=["map"])


@router.get("/{challenge_id}", response_model=MapViewResponse)
async def get_map_view(
    challenge_id: UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    view = await MapViewService(db).get(challenge_id)
    return MapViewResponse.from_view(view)
