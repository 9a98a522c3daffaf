"""Team ORM — a roster competing in exactly one challenge.

Invariants:
    - challenge_id is set at creation and never changed
    - total_steps == sum(step_entries.steps WHERE team_id = id), maintained by atomic increments
    - member_count == count(users WHERE team_id = id) <= challenge.max_team_size

Design Decisions:
    - total_steps denormalized: the map view reads it for every team on every request
    - members relationship is view-only; membership is written through users.team_id
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devstep.db.base import Base


class Team(Base):
    """Team aggregate — owns its running step total."""
    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("challenges.id"), nullable=False, index=True,
    )
    total_steps: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    member_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    challenge: Mapped["Challenge"] = relationship(
        "Challenge", back_populates="teams", lazy="selectin",
    )
    members: Mapped[list["User"]] = relationship(
        "User", viewonly=True, lazy="selectin", order_by="User.username",
    )
