"""User Service — registration and profile lookup.

Invariants:
    - username and email are unique (USER_EXISTS)
    - When registration_email_domain is configured, only that domain may sign up
    - A duplicate that slips past the pre-check is caught at commit as USER_EXISTS
"""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.errors import ConflictError, ValidationError
from devstep.models.user import User
from devstep.services.lookups import get_user_or_404

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: AsyncSession, allowed_email_domain: str | None = None):
        self.db = db
        self.allowed_email_domain = allowed_email_domain

    async def register(self, username: str, email: str, is_admin: bool = False) -> User:
        email = email.lower()
        if self.allowed_email_domain and not email.endswith(
            "@" + self.allowed_email_domain.lower(),
        ):
            raise ValidationError(
                f"Registration is only allowed with a "
                f"{self.allowed_email_domain} email address",
                "EMAIL_DOMAIN_NOT_ALLOWED", "email",
            )
        await self._ensure_available(username, email)

        user = User(username=username, email=email, is_admin=is_admin)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise _user_exists()
        logger.info(f"User '{username}' registered", extra={"user_id": user.id})
        return user

    async def get(self, user_id: UUID) -> User:
        return await get_user_or_404(self.db, user_id)

    async def _ensure_available(self, username: str, email: str) -> None:
        existing = (await self.db.execute(
            select(User.id).where(or_(User.email == email, User.username == username)),
        )).first()
        if existing:
            raise _user_exists()


def _user_exists() -> ConflictError:
    return ConflictError("User already exists", "USER_EXISTS")
