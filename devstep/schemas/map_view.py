"""Map View Schemas — team and milestone positions along a challenge route."""

from uuid import UUID

from pydantic import BaseModel

from devstep.core.domain_types import GeoPoint
from devstep.core.progress import MapView, MilestoneProgress, TeamProgress
from devstep.schemas.challenge import LocationOut


class Position(BaseModel):
    latitude: float
    longitude: float

    @classmethod
    def from_point(cls, point: GeoPoint) -> "Position":
        return cls(latitude=point.latitude, longitude=point.longitude)


class MapTeam(BaseModel):
    team_id: UUID
    team_name: str
    total_steps: int
    progress_percent: float
    distance_covered: float
    position: Position

    @classmethod
    def from_progress(cls, p: TeamProgress) -> "MapTeam":
        return cls(
            team_id=p.team_id,
            team_name=p.team_name,
            total_steps=p.total_steps,
            progress_percent=p.progress_percent,
            distance_covered=p.distance_covered,
            position=Position.from_point(p.position),
        )


class MapMilestone(BaseModel):
    name: str
    description: str | None
    steps_required: int
    progress_percent: float
    position: Position

    @classmethod
    def from_progress(cls, p: MilestoneProgress) -> "MapMilestone":
        return cls(
            name=p.name,
            description=p.description,
            steps_required=p.steps_required,
            progress_percent=p.progress_percent,
            position=Position.from_point(p.position),
        )


class MapViewResponse(BaseModel):
    challenge_id: UUID
    challenge_name: str
    start_location: LocationOut
    end_location: LocationOut
    total_distance: float
    total_steps: float
    teams: list[MapTeam]
    milestones: list[MapMilestone]

    @classmethod
    def from_view(cls, view: MapView) -> "MapViewResponse":
        c = view.challenge
        return cls(
            challenge_id=c.id,
            challenge_name=c.name,
            start_location=LocationOut(
                name=c.start_location_name,
                latitude=c.start_latitude, longitude=c.start_longitude,
            ),
            end_location=LocationOut(
                name=c.end_location_name,
                latitude=c.end_latitude, longitude=c.end_longitude,
            ),
            total_distance=c.total_distance,
            total_steps=c.total_steps,
            teams=[MapTeam.from_progress(t) for t in view.teams],
            milestones=[MapMilestone.from_progress(m) for m in view.milestones],
        )
