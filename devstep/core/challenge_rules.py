"""Challenge Rules — derived totals and cross-field validation for challenge definitions.

Invariants:
    - total_steps == total_distance * conversion_rate, recomputed on every change to either
    - start_date <= end_date; 1 <= min_team_size <= max_team_size
    - Coordinates inside [-90, 90] x [-180, 180]; milestone steps_required >= 0

Design Decisions:
    - ChallengeDraft is the single shape validated for create AND update: an update is
      "current draft + changes", re-validated as a whole
    - Milestones beyond total_steps are allowed here (projected past the end point)
"""

from dataclasses import dataclass, field, replace
from datetime import date

from devstep.core.domain_types import GeoPoint
from devstep.core.errors import ValidationError


@dataclass(frozen=True)
class LocationDraft:
    name: str
    latitude: float
    longitude: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class MilestoneDraft:
    name: str
    steps_required: int
    latitude: float
    longitude: float
    description: str | None = None


@dataclass(frozen=True)
class ChallengeDraft:
    name: str
    description: str
    start_location: LocationDraft
    end_location: LocationDraft
    total_distance: float
    conversion_rate: float
    start_date: date
    end_date: date
    max_team_size: int
    min_team_size: int = 1
    is_active: bool = False
    milestones: tuple[MilestoneDraft, ...] = field(default_factory=tuple)

    @property
    def total_steps(self) -> float:
        return compute_total_steps(self.total_distance, self.conversion_rate)


def compute_total_steps(total_distance: float, conversion_rate: float) -> float:
    return total_distance * conversion_rate


def apply_changes(draft: ChallengeDraft, changes: dict) -> ChallengeDraft:
    """Return a new draft with the given fields replaced. Unknown keys are ignored."""
    allowed = {k: v for k, v in changes.items() if k in ChallengeDraft.__dataclass_fields__}
    if "milestones" in allowed:
        allowed["milestones"] = tuple(allowed["milestones"])
    return replace(draft, **allowed)


def _check_coordinates(label: str, latitude: float, longitude: float) -> ValidationError | None:
    if not -90 <= latitude <= 90:
        return ValidationError(f"{label} latitude must be within [-90, 90]", field=label)
    if not -180 <= longitude <= 180:
        return ValidationError(f"{label} longitude must be within [-180, 180]", field=label)
    return None


def validate_challenge(draft: ChallengeDraft) -> ValidationError | None:
    """All cross-field rules for a challenge definition. Pure — returns the first violation."""
    if not draft.name.strip():
        return ValidationError("Challenge name cannot be empty", field="name")
    if draft.total_distance <= 0:
        return ValidationError("total_distance must be positive", field="total_distance")
    if draft.conversion_rate <= 0:
        return ValidationError("conversion_rate must be positive", field="conversion_rate")
    if draft.start_date > draft.end_date:
        return ValidationError(
            "start_date must not be after end_date", field="start_date",
        )
    if draft.min_team_size < 1:
        return ValidationError("min_team_size must be at least 1", field="min_team_size")
    if draft.max_team_size < draft.min_team_size:
        return ValidationError(
            "max_team_size must be >= min_team_size", field="max_team_size",
        )
    for label, loc in (("start_location", draft.start_location), ("end_location", draft.end_location)):
        error = _check_coordinates(label, loc.latitude, loc.longitude)
        if error:
            return error
    for i, milestone in enumerate(draft.milestones):
        if milestone.steps_required < 0:
            return ValidationError(
                f"Milestone #{i + 1} steps_required cannot be negative",
                field=f"milestones.{i}.steps_required",
            )
        error = _check_coordinates(f"milestones.{i}", milestone.latitude, milestone.longitude)
        if error:
            return error
    return None


def toggle_message(is_active: bool) -> str:
    return "Challenge has been started" if is_active else "Challenge has been ended"
