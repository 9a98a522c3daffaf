"""Shared builders for service tests — challenge drafts and identity headers."""

from datetime import timedelta
from uuid import uuid4

from devstep.core.challenge_rules import ChallengeDraft, LocationDraft, MilestoneDraft
from devstep.services.step_ledger import utc_today


def make_draft(**overrides) -> ChallengeDraft:
    """London → Edinburgh, 534 km at 1500 steps/km, window around today."""
    today = utc_today()
    values = dict(
        name="London to Edinburgh",
        description="Walk from London to Edinburgh virtually",
        start_location=LocationDraft("London", 51.5074, -0.1278),
        end_location=LocationDraft("Edinburgh", 55.9533, -3.1883),
        total_distance=534,
        conversion_rate=1500,
        start_date=today - timedelta(days=10),
        end_date=today + timedelta(days=10),
        max_team_size=6,
        min_team_size=3,
        is_active=True,
        milestones=(
            MilestoneDraft("Birmingham", 163 * 1500, 52.4862, -1.8904, "Reached Birmingham"),
            MilestoneDraft("Leeds", 315 * 1500, 53.8008, -1.5491, "Reached Leeds"),
        ),
    )
    values.update(overrides)
    return ChallengeDraft(**values)


def admin_headers() -> dict:
    return {"X-User-Id": str(uuid4()), "X-User-Role": "admin"}


def member_headers(user_id) -> dict:
    return {"X-User-Id": str(user_id)}
