"""Step Submission — batch upserts, per-entry errors and the team total invariant.

Invariants:
    - Resubmitting the same (date, steps) twice leaves the team total unchanged
    - team.total_steps == sum of its ledger entries after any sequence of submissions
    - A rejected entry never blocks the valid entries in the same batch
    - Request-level failures (no team, inactive challenge) change nothing
    - Membership is decided under the team lock, not before waiting for it
    - Concurrent submitters of one team never lose an increment
"""

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.orm.attributes import set_committed_value

from devstep.core.errors import StateError
from devstep.infrastructure.team_locks import get_team_lock
from devstep.models.step_entry import StepEntry
from devstep.models.team import Team
from devstep.models.user import User
from devstep.services.challenges import ChallengeService
from devstep.services.roster import RosterService
from devstep.services.step_ledger import StepLedgerService
from tests.services.factories import member_headers


async def _submit(client, user, entries):
    return await client.post(
        "/api/v1/steps",
        json={"entries": [{"date": d.isoformat(), "steps": s} for d, s in entries]},
        headers=member_headers(user.id),
    )


async def _team_total(session_factory, team_id) -> int:
    async with session_factory() as db:
        return (await db.execute(
            select(Team.total_steps).where(Team.id == team_id),
        )).scalar_one()


async def _ledger_sum(session_factory, team_id) -> int:
    async with session_factory() as db:
        return (await db.execute(
            select(func.coalesce(func.sum(StepEntry.steps), 0))
            .where(StepEntry.team_id == team_id),
        )).scalar_one()


# ─── Happy path ──────────────────────────────────────────────────

async def test_new_entry_increments_team_total(client, team, member, today):
    res = await _submit(client, member, [(today, 8000)])
    assert res.status_code == 201
    body = res.json()
    assert body["applied"][0]["created"] is True
    assert body["applied"][0]["delta"] == 8000
    assert body["errors"] == []
    assert body["net_delta"] == 8000
    assert body["new_team_total"] == 8000


async def test_overwrite_applies_only_the_difference(client, team, member, today, test_session_factory):
    await _submit(client, member, [(today, 8000)])
    res = await _submit(client, member, [(today, 10000)])
    applied = res.json()["applied"][0]
    assert applied["created"] is False
    assert applied["previous_steps"] == 8000
    assert applied["delta"] == 2000
    assert res.json()["new_team_total"] == 10000
    assert await _team_total(test_session_factory, team.id) == 10000


async def test_lowering_a_count_decreases_total(client, team, member, today, test_session_factory):
    await _submit(client, member, [(today, 9000)])
    res = await _submit(client, member, [(today, 4000)])
    assert res.json()["net_delta"] == -5000
    assert await _team_total(test_session_factory, team.id) == 4000


async def test_resubmission_is_idempotent(client, team, member, today, test_session_factory):
    entries = [(today - timedelta(days=1), 6000), (today, 7000)]
    await _submit(client, member, entries)
    res = await _submit(client, member, entries)
    assert res.json()["net_delta"] == 0
    assert await _team_total(test_session_factory, team.id) == 13000


async def test_total_matches_ledger_after_mixed_submissions(
    client, team, member, create_user, add_member, today, test_session_factory,
):
    teammate = await create_user("teammate")
    await add_member(team.id, teammate.id)

    await _submit(client, member, [(today - timedelta(days=2), 5000), (today, 3000)])
    await _submit(client, teammate, [(today, 12000)])
    await _submit(client, member, [(today - timedelta(days=2), 1000)])
    await _submit(client, teammate, [(today, 12000), (today - timedelta(days=1), 400)])

    total = await _team_total(test_session_factory, team.id)
    assert total == await _ledger_sum(test_session_factory, team.id)
    assert total == 1000 + 3000 + 12000 + 400


# ─── Per-entry rejections ────────────────────────────────────────

async def test_future_date_rejected_without_touching_total(client, team, member, today, test_session_factory):
    res = await _submit(client, member, [(today + timedelta(days=1), 5000)])
    assert res.status_code == 201
    body = res.json()
    assert body["applied"] == []
    assert body["errors"][0]["code"] == "FUTURE_DATE"
    assert body["errors"][0]["date"] == (today + timedelta(days=1)).isoformat()
    assert await _team_total(test_session_factory, team.id) == 0


async def test_invalid_entry_does_not_block_valid_ones(client, team, member, today, test_session_factory):
    res = await _submit(client, member, [
        (today - timedelta(days=1), 4000),
        (today - timedelta(days=30), 9999),
        (today, -10),
        (today, 2500),
    ])
    body = res.json()
    assert [a["steps"] for a in body["applied"]] == [4000, 2500]
    assert [e["code"] for e in body["errors"]] == ["DATE_BEFORE_START", "NEGATIVE_STEPS"]
    assert body["new_team_total"] == 6500
    assert await _team_total(test_session_factory, team.id) == 6500


async def test_date_after_end_rejected(client, create_challenge, create_team, create_user, add_member, today):
    challenge = await create_challenge(
        name="Ended Walk",
        start_date=today - timedelta(days=20),
        end_date=today - timedelta(days=5),
    )
    team = await create_team(challenge.id)
    user = await create_user()
    await add_member(team.id, user.id)

    res = await _submit(client, user, [(today - timedelta(days=1), 3000)])
    assert res.json()["errors"][0]["code"] == "DATE_AFTER_END"


# ─── Request-level failures ──────────────────────────────────────

async def test_user_without_team_rejected(client, create_user, today):
    loner = await create_user("loner")
    res = await _submit(client, loner, [(today, 1000)])
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "NOT_IN_TEAM"


async def test_inactive_challenge_rejected(client, team, member, today, test_session_factory):
    async with test_session_factory() as db:
        await ChallengeService(db).toggle_status(team.challenge_id)

    res = await _submit(client, member, [(today, 1000)])
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CHALLENGE_INACTIVE"
    assert await _team_total(test_session_factory, team.id) == 0


async def test_unknown_user_is_404(client, today):
    res = await client.post(
        "/api/v1/steps",
        json={"entries": [{"date": today.isoformat(), "steps": 10}]},
        headers=member_headers(uuid4()),
    )
    assert res.status_code == 404


async def test_empty_batch_is_validation_error(client, member):
    res = await client.post(
        "/api/v1/steps", json={"entries": []}, headers=member_headers(member.id),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Attribution ─────────────────────────────────────────────────

async def test_existing_entry_keeps_original_team(
    client, challenge, team, member, create_team, add_member,
    today, test_session_factory,
):
    """After switching teams, overwriting an old day moves only the OLD team's total."""
    day = today - timedelta(days=1)
    await _submit(client, member, [(day, 5000)])

    new_team = await create_team(challenge.id, "Team Beta")
    async with test_session_factory() as db:
        await RosterService(db).remove_member(team.id, member.id)
    await add_member(new_team.id, member.id)

    res = await _submit(client, member, [(day, 7000), (today, 1000)])
    assert res.json()["net_delta"] == 3000
    assert res.json()["new_team_total"] == 1000
    assert await _team_total(test_session_factory, team.id) == 7000
    assert await _team_total(test_session_factory, new_team.id) == 1000


# ─── Service-level ───────────────────────────────────────────────

async def test_service_uses_injected_today(team, member, today, test_session_factory):
    async with test_session_factory() as db:
        report = await StepLedgerService(db).submit(
            member.id, [(today, 100)], today=today - timedelta(days=1),
        )
    assert report.batch.applied == []
    assert report.batch.errors[0].code == "FUTURE_DATE"


# ─── Concurrency ─────────────────────────────────────────────────

async def test_concurrent_submitters_never_lose_increments(
    client, team, member, create_user, add_member, today, test_session_factory,
):
    walkers = [member]
    for i in range(4):
        user = await create_user(f"walker{i}")
        await add_member(team.id, user.id)
        walkers.append(user)

    results = await asyncio.gather(*(_submit(client, w, [(today, 3000)]) for w in walkers))

    assert [r.status_code for r in results] == [201] * 5
    total = await _team_total(test_session_factory, team.id)
    assert total == await _ledger_sum(test_session_factory, team.id)
    assert total == 15000


async def test_removal_while_waiting_for_team_lock_rejects_submission(
    team, member, today, test_session_factory,
):
    lock = get_team_lock(team.id)
    async with test_session_factory() as db:
        await lock.acquire()
        try:
            pending = asyncio.create_task(
                StepLedgerService(db).submit(member.id, [(today, 5000)]),
            )
            await asyncio.sleep(0.2)
            # same writes remove_member issues while it owns the lock
            async with test_session_factory() as other:
                await other.execute(
                    update(User).where(User.id == member.id).values(team_id=None),
                )
                await other.execute(
                    update(Team).where(Team.id == team.id)
                    .values(member_count=Team.member_count - 1),
                )
                await other.commit()
        finally:
            lock.release()

        with pytest.raises(StateError) as exc:
            await pending

    assert exc.value.code == "NOT_IN_TEAM"
    assert await _team_total(test_session_factory, team.id) == 0
    assert await _ledger_sum(test_session_factory, team.id) == 0


async def test_reported_total_is_the_stored_value(
    team, member, today, test_session_factory, monkeypatch,
):
    """A total read before another process wrote is not what gets reported."""
    async with test_session_factory() as db:
        await StepLedgerService(db).submit(member.id, [(today - timedelta(days=1), 5000)])

    load_team = StepLedgerService._load_team

    async def load_stale_team(self, team_id, user_id):
        loaded = await load_team(self, team_id, user_id)
        set_committed_value(loaded, "total_steps", 0)
        return loaded

    monkeypatch.setattr(StepLedgerService, "_load_team", load_stale_team)

    async with test_session_factory() as db:
        report = await StepLedgerService(db).submit(member.id, [(today, 2000)])

    assert report.new_team_total == 7000
    assert await _team_total(test_session_factory, team.id) == 7000
