"""Statistics Schemas — user, team and challenge summaries."""

from uuid import UUID

from pydantic import BaseModel

from devstep.core.aggregation import StepSummary


class DailySteps(BaseModel):
    date: str
    steps: int


def daily_steps_out(summary: StepSummary) -> list[DailySteps]:
    return [DailySteps(**d.to_dict()) for d in summary.daily_steps]


class UserStatistics(BaseModel):
    user_id: UUID
    total_steps: int
    average_steps_per_day: int
    daily_steps: list[DailySteps]


class TeamStatistics(BaseModel):
    team_id: UUID
    team_name: str
    total_steps: int
    average_steps_per_day: int
    percent_of_goal: float
    daily_steps: list[DailySteps]


class ChallengeStatistics(BaseModel):
    challenge_id: UUID
    challenge_name: str
    total_steps: int
    goal_steps: float
    percent_complete: float
    team_statistics: list[TeamStatistics]
