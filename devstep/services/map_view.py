"""Map View Service — loads a challenge with its teams and runs the progress projector."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.progress import MapView, build_map_view
from devstep.models.team import Team
from devstep.services.lookups import get_challenge_or_404


class MapViewService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, challenge_id: UUID) -> MapView:
        challenge = await get_challenge_or_404(self.db, challenge_id)
        result = await self.db.execute(
            select(Team).where(Team.challenge_id == challenge_id)
            .order_by(Team.created_at),
        )
        return build_map_view(challenge, result.scalars().all())
