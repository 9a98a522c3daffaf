"""Step Ledger Service — batch step submission and ledger reads.

Invariants:
    - Request-level preconditions (user, team, active challenge) raise; per-entry
      failures are collected and never abort the batch
    - Each entry is written inside its own SAVEPOINT: a unique-constraint race on one
      entry rolls back only that entry (DUPLICATE_ENTRY)
    - Team totals change only by the net delta per attributed team, applied as an
      atomic `total_steps = total_steps + :delta` in the same transaction as the entries
    - Existing entries keep their original team/challenge; their delta goes to THAT team

Design Decisions:
    - Submissions hold the user's current team lock: one writer per team in-process,
      the atomic increment covers other processes
    - Membership is re-read under the lock: a removal that held the lock first wins
      and the submission fails with NOT_IN_TEAM
    - The read transaction is closed before waiting on the lock, so no snapshot is
      held while another writer owns the team
    - new_team_total is the value RETURNING from the atomic UPDATE; TeamTally holds
      the in-process expectation and a mismatch means another process wrote too
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devstep.core.aggregation import (
    DailyBreakdown, TeamTally, daily_breakdown, net_deltas_by_team,
)
from devstep.core.errors import ConflictError, ErrorContext, NotFoundError, StateError
from devstep.core.step_ledger import (
    EntryOutcome, SubmissionBatch, check_challenge_accepts_steps,
    compute_delta, validate_entry,
)
from devstep.infrastructure.team_locks import team_locks
from devstep.models.challenge import Challenge
from devstep.models.step_entry import StepEntry
from devstep.models.team import Team
from devstep.models.user import User
from devstep.services.lookups import get_team_or_404, get_user_or_404

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class SubmissionReport:
    batch: SubmissionBatch
    new_team_total: int


class StepLedgerService:
    """Writes and reads the per-user, per-day step ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit(
        self,
        user_id: UUID,
        entries: Iterable[tuple[date, int]],
        today: date | None = None,
    ) -> SubmissionReport:
        today = today or utc_today()
        user = await get_user_or_404(self.db, user_id)
        team_id = _require_team(user)
        await self.db.commit()

        async with team_locks([team_id]):
            user = await get_user_or_404(self.db, user_id)
            if user.team_id != team_id:
                raise StateError(
                    "User left the team while the submission was waiting",
                    "NOT_IN_TEAM", ErrorContext(user_id=user_id, team_id=team_id),
                )
            team = await self._load_team(team_id, user_id)
            challenge = team.challenge
            ctx = ErrorContext(
                user_id=user_id, team_id=team.id, challenge_id=team.challenge_id,
            )
            error = check_challenge_accepts_steps(challenge, ctx)
            if error:
                raise error

            tally = TeamTally(team_id=team.id, total_steps=team.total_steps)
            batch = SubmissionBatch()
            for entry_date, steps in entries:
                await self._apply_entry(
                    batch, user, team, challenge, entry_date, steps, today,
                )

            deltas = net_deltas_by_team(batch.applied)
            persisted = await self._apply_team_deltas(deltas)
            await self.db.commit()

            expected = tally.apply_delta(deltas.get(team.id, 0))
            new_total = persisted.get(team.id, expected)
            if new_total != expected:
                logger.warning(
                    f"Team total moved outside this process "
                    f"(expected {expected}, stored {new_total})",
                    extra={"team_id": team.id},
                )

        logger.info(
            f"Steps submitted: {len(batch.applied)} applied, "
            f"{len(batch.errors)} rejected",
            extra={
                "user_id": user_id, "team_id": team.id,
                "delta": batch.net_delta, "entries": len(batch.applied),
                "rejected": len(batch.errors),
            },
        )
        return SubmissionReport(batch=batch, new_team_total=new_total)

    async def list_user_entries(
        self, user_id: UUID,
        start_date: date | None = None, end_date: date | None = None,
    ) -> list[StepEntry]:
        await get_user_or_404(self.db, user_id)
        query = select(StepEntry).where(StepEntry.user_id == user_id)
        query = _date_filter(query, start_date, end_date)
        result = await self.db.execute(query.order_by(StepEntry.date.desc()))
        return list(result.scalars().all())

    async def team_daily_steps(
        self, team_id: UUID,
        start_date: date | None = None, end_date: date | None = None,
    ) -> tuple[Team, list[DailyBreakdown]]:
        team = await get_team_or_404(self.db, team_id)
        query = select(StepEntry).where(StepEntry.team_id == team_id)
        query = _date_filter(query, start_date, end_date)
        result = await self.db.execute(query.order_by(StepEntry.date))
        return team, daily_breakdown(result.scalars().all())

    # ─── internals ───────────────────────────────────────────────

    async def _apply_team_deltas(self, deltas: dict[UUID, int]) -> dict[UUID, int]:
        """One atomic increment per team; returns the stored totals."""
        persisted: dict[UUID, int] = {}
        for team_id, delta in deltas.items():
            result = await self.db.execute(
                update(Team)
                .where(Team.id == team_id)
                .values(total_steps=Team.total_steps + delta)
                .returning(Team.total_steps)
                .execution_options(synchronize_session=False),
            )
            persisted[team_id] = result.scalar_one()
        return persisted

    async def _load_team(self, team_id: UUID, user_id: UUID) -> Team:
        try:
            return await get_team_or_404(self.db, team_id)
        except NotFoundError as e:
            e.context.user_id = user_id
            raise

    async def _apply_entry(
        self,
        batch: SubmissionBatch,
        user: User,
        team: Team,
        challenge: Challenge,
        entry_date: date,
        steps: int,
        today: date,
    ) -> None:
        error = validate_entry(challenge, entry_date, steps, today)
        if error:
            error.context.user_id = user.id
            error.context.team_id = team.id
            logger.warning(
                f"Rejected step entry for {entry_date}: {error.message}",
                extra={"user_id": user.id, "error_code": error.code},
            )
            batch.record_failure(error)
            return
        try:
            async with self.db.begin_nested():
                outcome = await self._upsert(user, team, challenge, entry_date, steps)
        except IntegrityError:
            logger.warning(
                f"Concurrent write for {entry_date}, entry skipped",
                extra={"user_id": user.id, "error_code": "DUPLICATE_ENTRY"},
            )
            batch.record_failure(ConflictError(
                "Another submission for this date was saved concurrently",
                "DUPLICATE_ENTRY",
                ErrorContext(
                    user_id=user.id, team_id=team.id,
                    challenge_id=challenge.id, entry_date=entry_date,
                ),
            ))
            return
        batch.record_success(outcome)

    async def _upsert(
        self, user: User, team: Team, challenge: Challenge,
        entry_date: date, steps: int,
    ) -> EntryOutcome:
        existing = (await self.db.execute(
            select(StepEntry)
            .where(StepEntry.user_id == user.id, StepEntry.date == entry_date)
            .with_for_update(),
        )).scalar_one_or_none()

        if existing:
            previous = existing.steps
            existing.steps = steps
            await self.db.flush()
            return EntryOutcome(
                entry_id=existing.id, entry_date=entry_date, steps=steps,
                previous_steps=previous, delta=compute_delta(previous, steps),
                team_id=existing.team_id, created=False,
            )

        entry = StepEntry(
            user_id=user.id, team_id=team.id, challenge_id=challenge.id,
            date=entry_date, steps=steps,
        )
        self.db.add(entry)
        await self.db.flush()
        return EntryOutcome(
            entry_id=entry.id, entry_date=entry_date, steps=steps,
            previous_steps=0, delta=compute_delta(None, steps),
            team_id=team.id, created=True,
        )


def _require_team(user: User) -> UUID:
    if user.team_id is None:
        raise StateError(
            "User must be part of a team to register steps",
            "NOT_IN_TEAM", ErrorContext(user_id=user.id),
        )
    return user.team_id


def _date_filter(query, start_date: date | None, end_date: date | None):
    if start_date:
        query = query.where(StepEntry.date >= start_date)
    if end_date:
        query = query.where(StepEntry.date <= end_date)
    return query
