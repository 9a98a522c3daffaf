"""User Routes — registration and profile lookup.

Invariants:
    - /me resolves the acting user from identity headers
    - Registration never creates admins; admin role is granted by the identity provider
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor
from devstep.config import get_settings
from devstep.infrastructure.database import get_db
from devstep.schemas.user import UserCreate, UserResponse
from devstep.services.users import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def register_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a participant."""
    service = UserService(db, get_settings().registration_email_domain)
    user = await service.register(body.username, body.email)
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def get_profile(
    actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get(actor.user_id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get(user_id)
    return UserResponse.model_validate(user)
