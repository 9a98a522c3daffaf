"""Geo Interpolator — maps a progress fraction onto the straight line between two points.

Invariants:
    - Linear per-axis interpolation (not great-circle)
    - Fraction clamped to [0, 1] unless clamp=False
    - Pure, stateless, never raises

Design Decisions:
    - Linear over great-circle: routes are a few hundred km, error is invisible on the map
    - clamp flag instead of a second function: milestones share the exact same formula
      but must surface misconfigured positions past the end point
"""

from devstep.core.domain_types import GeoPoint


def clamp_fraction(fraction: float) -> float:
    """Clamp a progress fraction into [0, 1]."""
    return min(1.0, max(0.0, fraction))


def interpolate_position(
    start: GeoPoint, end: GeoPoint, fraction: float, clamp: bool = True,
) -> GeoPoint:
    """Point at `fraction` of the way from start to end. Pure, no IO."""
    if clamp:
        fraction = clamp_fraction(fraction)
    return GeoPoint(
        latitude=start.latitude + (end.latitude - start.latitude) * fraction,
        longitude=start.longitude + (end.longitude - start.longitude) * fraction,
    )
