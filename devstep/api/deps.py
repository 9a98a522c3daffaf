"""Identity Dependencies — resolve the acting user from gateway headers.

Invariants:
    - X-User-Id must be a UUID; missing/malformed -> 401 (AuthenticationError)
    - Admin-only routes require X-User-Role: admin -> otherwise 403
    - No token verification here: the upstream gateway authenticates and sets the headers

Design Decisions:
    - Header-based Actor over in-process JWT: password hashing and token issuance
      belong to the identity provider, not this service
"""

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Header

from devstep.core.domain_types import UserId, UserRole
from devstep.core.errors import AuthenticationError, PermissionDeniedError


@dataclass(frozen=True)
class Actor:
    user_id: UserId
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    if not x_user_id:
        raise AuthenticationError()
    try:
        user_id = UserId(UUID(x_user_id))
    except ValueError:
        raise AuthenticationError("X-User-Id is not a valid user id")
    role = UserRole.ADMIN if (x_user_role or "").lower() == "admin" else UserRole.MEMBER
    return Actor(user_id=user_id, role=role)


async def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_admin:
        raise PermissionDeniedError()
    return actor
