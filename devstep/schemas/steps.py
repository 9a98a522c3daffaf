"""Step Schemas — batch submission payloads and ledger views.

Invariants:
    - steps is a plain int here: negative values are rejected per entry by the ledger,
      not for the whole request
    - entries keep client order; errors report the offending entry's date
"""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from devstep.core.step_ledger import EntryOutcome


class StepEntryIn(BaseModel):
    date: dt.date
    steps: int


class StepSubmission(BaseModel):
    entries: list[StepEntryIn] = Field(min_length=1, max_length=366)


class AppliedEntry(BaseModel):
    id: UUID
    date: dt.date
    steps: int
    previous_steps: int
    delta: int
    created: bool

    @classmethod
    def from_outcome(cls, outcome: EntryOutcome) -> "AppliedEntry":
        return cls(
            id=outcome.entry_id,
            date=outcome.entry_date,
            steps=outcome.steps,
            previous_steps=outcome.previous_steps,
            delta=outcome.delta,
            created=outcome.created,
        )


class EntryError(BaseModel):
    date: str | None
    code: str
    category: str
    message: str


class StepSubmissionResponse(BaseModel):
    applied: list[AppliedEntry]
    errors: list[EntryError]
    net_delta: int
    new_team_total: int


class StepEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    date: dt.date
    steps: int
    team_id: UUID
    challenge_id: UUID


class MemberSteps(BaseModel):
    user_id: UUID
    steps: int


class DailyTeamSteps(BaseModel):
    date: str
    total_steps: int
    entries: list[MemberSteps]


class TeamStepsResponse(BaseModel):
    team_id: UUID
    team_name: str
    total_steps: int
    daily_steps: list[DailyTeamSteps]
