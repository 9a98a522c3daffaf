"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from devstep.models.user import User  # noqa: F401
from devstep.models.challenge import Challenge  # noqa: F401
from devstep.models.milestone import Milestone  # noqa: F401
from devstep.models.team import Team  # noqa: F401
from devstep.models.step_entry import StepEntry  # noqa: F401
