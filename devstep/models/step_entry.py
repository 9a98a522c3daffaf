"""StepEntry ORM — one user's step count for one calendar date.

Invariants:
    - UNIQUE (user_id, date): at most one entry per user per day
    - steps >= 0 (CHECK constraint backs the core validation)
    - team_id/challenge_id captured at creation, never reattributed

Design Decisions:
    - date is a DATE column (UTC calendar day), not a timestamp: the day is the key
"""

import uuid
from datetime import date as date_type, datetime, timezone

from sqlalchemy import (
    CheckConstraint, Date, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from devstep.db.base import Base


class StepEntry(Base):
    """Ledger row — overwritten on resubmission, never deleted in normal flow."""
    __tablename__ = "step_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_step_entries_user_date"),
        CheckConstraint("steps >= 0", name="ck_step_entries_steps_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("teams.id"), nullable=False, index=True,
    )
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("challenges.id"), nullable=False, index=True,
    )
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    steps: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
