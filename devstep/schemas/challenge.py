"""Challenge Schemas — Pydantic models with field-level validation for challenge admin.

Invariants:
    - Coordinates bounded to valid lat/lng ranges; distances and rates strictly positive
    - ChallengeUpdate: every field optional, only provided fields are applied
    - Cross-field rules (date order, team size order) are checked by core.challenge_rules

Design Decisions:
    - Nested LocationIn instead of flat lat/lng fields: matches how the map client sends it
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from devstep.core.challenge_rules import (
    ChallengeDraft, LocationDraft, MilestoneDraft, toggle_message,
)
from devstep.schemas.user import UserSummary


class LocationIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def to_draft(self) -> LocationDraft:
        return LocationDraft(self.name, self.latitude, self.longitude)


class MilestoneIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    steps_required: int = Field(ge=0)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def to_draft(self) -> MilestoneDraft:
        return MilestoneDraft(
            name=self.name, steps_required=self.steps_required,
            latitude=self.latitude, longitude=self.longitude,
            description=self.description,
        )


class ChallengeCreate(BaseModel):
    """Challenge creation — conversion_rate falls back to the configured default."""
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    start_location: LocationIn
    end_location: LocationIn
    total_distance: float = Field(gt=0)
    conversion_rate: float | None = Field(None, gt=0)
    start_date: date
    end_date: date
    min_team_size: int = Field(1, ge=1)
    max_team_size: int = Field(ge=1)
    milestones: list[MilestoneIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    def to_draft(self, default_conversion_rate: float) -> ChallengeDraft:
        return ChallengeDraft(
            name=self.name,
            description=self.description,
            start_location=self.start_location.to_draft(),
            end_location=self.end_location.to_draft(),
            total_distance=self.total_distance,
            conversion_rate=self.conversion_rate or default_conversion_rate,
            start_date=self.start_date,
            end_date=self.end_date,
            min_team_size=self.min_team_size,
            max_team_size=self.max_team_size,
            milestones=tuple(m.to_draft() for m in self.milestones),
        )


class ChallengeUpdate(BaseModel):
    """Partial update — omitted fields keep their current value."""
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=5000)
    start_location: LocationIn | None = None
    end_location: LocationIn | None = None
    total_distance: float | None = Field(None, gt=0)
    conversion_rate: float | None = Field(None, gt=0)
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool | None = None
    min_team_size: int | None = Field(None, ge=1)
    max_team_size: int | None = Field(None, ge=1)
    milestones: list[MilestoneIn] | None = None

    def to_changes(self) -> dict:
        """Only the fields the client actually sent, converted to draft values."""
        changes: dict = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None:
                continue
            if name in ("start_location", "end_location"):
                value = value.to_draft()
            elif name == "milestones":
                value = tuple(m.to_draft() for m in value)
            changes[name] = value
        return changes


class LocationOut(BaseModel):
    name: str
    latitude: float
    longitude: float


class MilestoneOut(BaseModel):
    name: str
    description: str | None
    steps_required: int
    latitude: float
    longitude: float


class ChallengeTeamOut(BaseModel):
    id: UUID
    name: str
    total_steps: int
    members: list[UserSummary]


class ChallengeResponse(BaseModel):
    id: UUID
    name: str
    description: str
    start_location: LocationOut
    end_location: LocationOut
    total_distance: float
    conversion_rate: float
    total_steps: float
    start_date: date
    end_date: date
    is_active: bool
    min_team_size: int
    max_team_size: int
    milestones: list[MilestoneOut]
    teams: list[ChallengeTeamOut]

    @classmethod
    def from_model(cls, challenge) -> "ChallengeResponse":
        return cls(
            id=challenge.id,
            name=challenge.name,
            description=challenge.description,
            start_location=LocationOut(
                name=challenge.start_location_name,
                latitude=challenge.start_latitude,
                longitude=challenge.start_longitude,
            ),
            end_location=LocationOut(
                name=challenge.end_location_name,
                latitude=challenge.end_latitude,
                longitude=challenge.end_longitude,
            ),
            total_distance=challenge.total_distance,
            conversion_rate=challenge.conversion_rate,
            total_steps=challenge.total_steps,
            start_date=challenge.start_date,
            end_date=challenge.end_date,
            is_active=challenge.is_active,
            min_team_size=challenge.min_team_size,
            max_team_size=challenge.max_team_size,
            milestones=[
                MilestoneOut(
                    name=m.name, description=m.description,
                    steps_required=m.steps_required,
                    latitude=m.latitude, longitude=m.longitude,
                )
                for m in challenge.ordered_milestones
            ],
            teams=[
                ChallengeTeamOut(
                    id=t.id, name=t.name, total_steps=t.total_steps,
                    members=[UserSummary.model_validate(u) for u in t.members],
                )
                for t in challenge.teams
            ],
        )


class ToggleStatusResponse(BaseModel):
    is_active: bool
    message: str

    @classmethod
    def for_state(cls, is_active: bool) -> "ToggleStatusResponse":
        return cls(is_active=is_active, message=toggle_message(is_active))
