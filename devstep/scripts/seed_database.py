"""Seed Database — demo challenge, two teams and a handful of users.

Invariants:
    - Clears existing rows first: only meant for local/dev databases
    - Goes through the services so derived columns (total_steps, member_count) are correct

Usage:
    python -m devstep.scripts.seed_database
"""

import asyncio
import logging
from datetime import date

from sqlalchemy import delete

from devstep.config import get_settings
from devstep.core.challenge_rules import ChallengeDraft, LocationDraft, MilestoneDraft
from devstep.db.session import create_session_factory
from devstep.infrastructure.observability import setup_logging
from devstep.models import Challenge, Milestone, StepEntry, Team, User
from devstep.services.challenges import ChallengeService
from devstep.services.roster import RosterService
from devstep.services.users import UserService

logger = logging.getLogger(__name__)

STEPS_PER_KM = 1500

LONDON_TO_EDINBURGH = ChallengeDraft(
    name="London to Edinburgh Challenge",
    description="Walk from London to Edinburgh virtually",
    start_location=LocationDraft("London", 51.5074, -0.1278),
    end_location=LocationDraft("Edinburgh", 55.9533, -3.1883),
    total_distance=534,
    conversion_rate=STEPS_PER_KM,
    start_date=date(2025, 4, 1),
    end_date=date(2025, 4, 30),
    max_team_size=6,
    min_team_size=3,
    is_active=True,
    milestones=(
        MilestoneDraft("Birmingham", 163 * STEPS_PER_KM, 52.4862, -1.8904, "Reached Birmingham"),
        MilestoneDraft("Manchester", 263 * STEPS_PER_KM, 53.4808, -2.2426, "Reached Manchester"),
        MilestoneDraft("Leeds", 315 * STEPS_PER_KM, 53.8008, -1.5491, "Reached Leeds"),
    ),
)

TEAMS = {
    "Team Alpha": ("First team to participate", ["user1", "user2"]),
    "Team Beta": ("Second team to participate", ["user3", "user4"]),
}


async def seed() -> None:
    session_factory = create_session_factory(get_settings().database_url)
    async with session_factory() as db:
        logger.info("Clearing existing data")
        for model in (StepEntry, User, Team, Milestone, Challenge):
            await db.execute(delete(model))
        await db.commit()

        challenge = await ChallengeService(db).create(LONDON_TO_EDINBURGH)
        users = UserService(db)
        await users.register("admin", "admin@devoteam.com", is_admin=True)

        roster = RosterService(db)
        for team_name, (description, usernames) in TEAMS.items():
            team = await roster.create_team(team_name, description, challenge.id)
            for username in usernames:
                user = await users.register(username, f"{username}@devoteam.com")
                await roster.add_member(team.id, user.id)

    logger.info("Database seeded successfully")


if __name__ == "__main__":
    setup_logging("INFO", "text")
    asyncio.run(seed())
