"""Tests for step ledger rules — per-entry validation, deltas and batch bookkeeping."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4

from devstep.core.errors import ErrorCategory, ValidationError
from devstep.core.step_ledger import (
    EntryOutcome, SubmissionBatch, check_challenge_accepts_steps,
    compute_delta, validate_entry,
)

TODAY = date(2025, 4, 15)


@dataclass
class FakeChallenge:
    id: UUID
    start_date: date = date(2025, 4, 1)
    end_date: date = date(2025, 4, 30)
    is_active: bool = True


def _outcome(delta: int, team_id: UUID | None = None) -> EntryOutcome:
    return EntryOutcome(
        entry_id=uuid4(), entry_date=TODAY, steps=max(delta, 0),
        previous_steps=0, delta=delta, team_id=team_id or uuid4(), created=True,
    )


# ─── compute_delta ───────────────────────────────────────────────

def test_delta_for_new_entry_is_full_count():
    assert compute_delta(None, 8000) == 8000


def test_delta_for_overwrite_is_difference():
    assert compute_delta(8000, 10000) == 2000


def test_delta_for_lowered_count_is_negative():
    assert compute_delta(10000, 6000) == -4000


def test_resubmitting_same_value_is_zero_delta():
    assert compute_delta(5000, 5000) == 0


# ─── check_challenge_accepts_steps ───────────────────────────────

def test_active_challenge_accepts_steps():
    assert check_challenge_accepts_steps(FakeChallenge(uuid4())) is None


def test_inactive_challenge_rejected():
    error = check_challenge_accepts_steps(FakeChallenge(uuid4(), is_active=False))
    assert error.code == "CHALLENGE_INACTIVE"
    assert error.http_status == 409


def test_missing_challenge_rejected():
    assert check_challenge_accepts_steps(None).code == "TEAM_WITHOUT_CHALLENGE"


# ─── validate_entry ──────────────────────────────────────────────

def test_entry_inside_window_is_valid():
    assert validate_entry(FakeChallenge(uuid4()), date(2025, 4, 10), 5000, TODAY) is None


def test_boundary_dates_are_valid():
    challenge = FakeChallenge(uuid4(), end_date=TODAY)
    assert validate_entry(challenge, date(2025, 4, 1), 1, TODAY) is None
    assert validate_entry(challenge, TODAY, 1, TODAY) is None


def test_date_before_start_rejected():
    error = validate_entry(FakeChallenge(uuid4()), date(2025, 3, 31), 100, TODAY)
    assert isinstance(error, ValidationError)
    assert error.code == "DATE_BEFORE_START"
    assert error.category == ErrorCategory.VALIDATION


def test_date_after_end_rejected():
    challenge = FakeChallenge(uuid4(), end_date=date(2025, 4, 10))
    error = validate_entry(challenge, date(2025, 4, 12), 100, TODAY)
    assert error.code == "DATE_AFTER_END"


def test_future_date_rejected():
    error = validate_entry(FakeChallenge(uuid4()), date(2025, 4, 16), 100, TODAY)
    assert error.code == "FUTURE_DATE"


def test_negative_steps_rejected():
    error = validate_entry(FakeChallenge(uuid4()), date(2025, 4, 10), -1, TODAY)
    assert error.code == "NEGATIVE_STEPS"


def test_zero_steps_is_valid():
    assert validate_entry(FakeChallenge(uuid4()), date(2025, 4, 10), 0, TODAY) is None


def test_window_checked_before_future():
    """A date past the end AND in the future reports the window violation."""
    challenge = FakeChallenge(uuid4(), end_date=date(2025, 4, 10))
    error = validate_entry(challenge, date(2025, 4, 20), 100, TODAY)
    assert error.code == "DATE_AFTER_END"


def test_entry_error_carries_date():
    error = validate_entry(FakeChallenge(uuid4()), date(2025, 4, 16), 100, TODAY)
    assert error.to_entry_error() == {
        "date": "2025-04-16",
        "code": "FUTURE_DATE",
        "category": "validation",
        "message": "Cannot register steps for future dates",
    }


# ─── SubmissionBatch ─────────────────────────────────────────────

def test_empty_batch_has_zero_net_delta():
    assert SubmissionBatch().net_delta == 0


def test_batch_net_delta_sums_applied_only():
    batch = SubmissionBatch()
    batch.record_success(_outcome(3000))
    batch.record_success(_outcome(-1000))
    batch.record_failure(ValidationError("bad", "NEGATIVE_STEPS"))
    assert batch.net_delta == 2000
    assert len(batch.errors) == 1
