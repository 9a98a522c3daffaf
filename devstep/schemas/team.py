"""Team Schemas — team creation, roster changes and team views."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from devstep.schemas.user import UserSummary


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)
    challenge_id: UUID

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class MemberAdd(BaseModel):
    user_id: UUID


class TeamResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    challenge_id: UUID
    challenge_name: str | None = None
    total_steps: int
    member_count: int
    below_min_team_size: bool = False
    members: list[UserSummary]

    @classmethod
    def from_model(cls, team) -> "TeamResponse":
        challenge = team.challenge
        return cls(
            id=team.id,
            name=team.name,
            description=team.description,
            challenge_id=team.challenge_id,
            challenge_name=challenge.name if challenge else None,
            total_steps=team.total_steps,
            member_count=team.member_count,
            below_min_team_size=(
                team.member_count < challenge.min_team_size if challenge else False
            ),
            members=[UserSummary.model_validate(u) for u in team.members],
        )


class RosterChangeResponse(BaseModel):
    message: str
    team: TeamResponse
