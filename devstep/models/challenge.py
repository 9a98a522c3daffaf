"""Challenge ORM — a virtual route between two geo-points with a date window.

Invariants:
    - total_steps == total_distance * conversion_rate (set by services from core.challenge_rules)
    - start_date <= end_date; min_team_size <= max_team_size
    - Never deleted while a team references it

Design Decisions:
    - Locations stored as flat columns: no JSON querying needed, start_point/end_point
      expose them as GeoPoint for the projector (satisfies ChallengeLike)
    - Milestones in their own table ordered by position
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devstep.core.domain_types import GeoPoint
from devstep.db.base import Base


class Challenge(Base):
    """Challenge aggregate root — owns milestones, referenced by teams."""
    __tablename__ = "challenges"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_location_name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    start_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    end_location_name: Mapped[str] = mapped_column(String(200), nullable=False)
    end_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    end_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    total_distance: Mapped[float] = mapped_column(Float, nullable=False)
    conversion_rate: Mapped[float] = mapped_column(Float, nullable=False)
    total_steps: Mapped[float] = mapped_column(Float, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_team_size: Mapped[int] = mapped_column(Integer, nullable=False)
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

    teams: Mapped[list["Team"]] = relationship(
        "Team", back_populates="challenge", lazy="selectin",
        order_by="Team.created_at",
    )
    milestones: Mapped[list["Milestone"]] = relationship(
        "Milestone", back_populates="challenge",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Milestone.position",
    )

    @property
    def start_point(self) -> GeoPoint:
        return GeoPoint(self.start_latitude, self.start_longitude)

    @property
    def end_point(self) -> GeoPoint:
        return GeoPoint(self.end_latitude, self.end_longitude)

    @property
    def ordered_milestones(self) -> list["Milestone"]:
        return sorted(self.milestones, key=lambda m: m.position)
