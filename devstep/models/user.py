"""User ORM — an authenticated participant, optionally on one team.

Invariants:
    - username and email are unique
    - team_id is nullable; a user belongs to at most one team at a time

Design Decisions:
    - Roster is derived from users.team_id (single source of truth); teams.member_count
      is only the capacity counter used by the conditional add
    - No password column: credentials live with the identity provider
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devstep.db.base import Base


class User(Base):
    """Challenge participant."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("teams.id"), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
