"""Step Routes — batch submission for the acting user and ledger views.

Invariants:
    - POST /steps always answers 201 once preconditions pass, even when some entries
      were rejected: per-entry failures are in `errors`, successes in `applied`
    - Request-level failures (no team, inactive challenge) use the global error envelope
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor
from devstep.infrastructure.database import get_db
from devstep.schemas.steps import (
    AppliedEntry, DailyTeamSteps, EntryError, StepEntryOut, StepSubmission,
    StepSubmissionResponse, TeamStepsResponse,
)
from devstep.services.step_ledger import StepLedgerService

router = APIRouter(prefix="/api/v1/steps", tags=["steps"])


@router.post(
    "", response_model=StepSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_steps(
    body: StepSubmission,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Register one or more daily step counts for the acting user."""
    report = await StepLedgerService(db).submit(
        actor.user_id, [(e.date, e.steps) for e in body.entries],
    )
    return StepSubmissionResponse(
        applied=[AppliedEntry.from_outcome(o) for o in report.batch.applied],
        errors=[EntryError(**e.to_entry_error()) for e in report.batch.errors],
        net_delta=report.batch.net_delta,
        new_team_total=report.new_team_total,
    )


@router.get("/me", response_model=list[StepEntryOut])
async def get_my_steps(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    entries = await StepLedgerService(db).list_user_entries(
        actor.user_id, start_date, end_date,
    )
    return [StepEntryOut.model_validate(e) for e in entries]


@router.get("/teams/{team_id}", response_model=TeamStepsResponse)
async def get_team_steps(
    team_id: UUID,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    team, days = await StepLedgerService(db).team_daily_steps(
        team_id, start_date, end_date,
    )
    return TeamStepsResponse(
        team_id=team.id,
        team_name=team.name,
        total_steps=team.total_steps,
        daily_steps=[DailyTeamSteps(**d.to_dict()) for d in days],
    )
