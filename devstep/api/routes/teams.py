"""Team Routes — team creation and roster management.

Invariants:
    - Team creation and roster changes require the admin role
    - Roster responses return the committed team state (members, member_count)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.api.deps import Actor, get_actor, require_admin
from devstep.infrastructure.database import get_db
from devstep.schemas.team import (
    MemberAdd, RosterChangeResponse, TeamCreate, TeamResponse,
)
from devstep.services.roster import RosterService

router = APIRouter(prefix="/api/v1/teams", tags=["teams"])


@router.post(
    "", response_model=TeamResponse, status_code=status.HTTP_201_CREATED,
)
async def create_team(
    body: TeamCreate,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team = await RosterService(db).create_team(
        body.name, body.description, body.challenge_id,
    )
    return TeamResponse.from_model(team)


@router.get("", response_model=list[TeamResponse])
async def list_teams(
    _: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db),
):
    teams = await RosterService(db).list_teams()
    return [TeamResponse.from_model(t) for t in teams]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return TeamResponse.from_model(await RosterService(db).get_team(team_id))


@router.post("/{team_id}/members", response_model=RosterChangeResponse)
async def add_team_member(
    team_id: UUID,
    body: MemberAdd,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team = await RosterService(db).add_member(team_id, body.user_id)
    return RosterChangeResponse(
        message=f"User {body.user_id} added to team {team.name}",
        team=TeamResponse.from_model(team),
    )


@router.delete("/{team_id}/members/{user_id}", response_model=RosterChangeResponse)
async def remove_team_member(
    team_id: UUID,
    user_id: UUID,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    team = await RosterService(db).remove_member(team_id, user_id)
    return RosterChangeResponse(
        message=f"User {user_id} removed from team {team.name}",
        team=TeamResponse.from_model(team),
    )
