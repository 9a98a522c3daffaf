"""Step Ledger Rules — pure validation and delta computation for daily step submissions.

Invariants:
    - One ledger entry per (user, calendar date); an existing entry is overwritten, never duplicated
    - delta = new_steps - previous_steps (previous = 0 when no entry exists)
    - An entry's team/challenge are captured at creation and never rewritten
    - Per-entry rules return an error instead of raising: a bad entry never aborts the batch

Design Decisions:
    - "today" is an argument, not a clock read: keeps the rules deterministic in tests
    - SubmissionBatch collects outcomes and errors in input order; the shell applies
      the net delta per team once, after all entries are written
"""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from devstep.core.errors import DevStepError, ErrorContext, StateError, ValidationError
from devstep.core.repository_protocols import ChallengeLike


@dataclass(frozen=True)
class EntryOutcome:
    """Result of applying one (date, steps) pair to the ledger."""
    entry_id: UUID
    entry_date: date
    steps: int
    previous_steps: int
    delta: int
    team_id: UUID
    created: bool


@dataclass
class SubmissionBatch:
    """Accumulates per-entry outcomes and errors for one batch submission."""
    applied: list[EntryOutcome] = field(default_factory=list)
    errors: list[DevStepError] = field(default_factory=list)

    @property
    def net_delta(self) -> int:
        return sum(o.delta for o in self.applied)

    def record_success(self, outcome: EntryOutcome) -> None:
        self.applied.append(outcome)

    def record_failure(self, error: DevStepError) -> None:
        self.errors.append(error)


def compute_delta(previous_steps: int | None, new_steps: int) -> int:
    """Signed change to the team total when (user, date) is set to new_steps."""
    return new_steps - (previous_steps or 0)


def check_challenge_accepts_steps(
    challenge: ChallengeLike | None, context: ErrorContext | None = None,
) -> StateError | None:
    """Request-level gate: the team's challenge must exist and be active."""
    if challenge is None:
        return StateError(
            "Team has no associated challenge",
            "TEAM_WITHOUT_CHALLENGE", context,
        )
    if not challenge.is_active:
        return StateError(
            "Cannot register steps for an inactive challenge",
            "CHALLENGE_INACTIVE", context,
        )
    return None


def validate_entry(
    challenge: ChallengeLike, entry_date: date, steps: int, today: date,
) -> ValidationError | None:
    """Per-entry rules: date inside the challenge window, not in the future, steps >= 0."""
    ctx = ErrorContext(challenge_id=challenge.id, entry_date=entry_date)
    if entry_date < challenge.start_date:
        return ValidationError(
            "Date is before challenge start date",
            "DATE_BEFORE_START", "date", ctx,
        )
    if entry_date > challenge.end_date:
        return ValidationError(
            "Date is after challenge end date",
            "DATE_AFTER_END", "date", ctx,
        )
    if entry_date > today:
        return ValidationError(
            "Cannot register steps for future dates",
            "FUTURE_DATE", "date", ctx,
        )
    if steps < 0:
        return ValidationError(
            "Step count cannot be negative",
            "NEGATIVE_STEPS", "steps", ctx,
        )
    return None
