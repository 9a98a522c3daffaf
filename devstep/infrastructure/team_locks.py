"""Per-Team Serialization — one asyncio.Lock per team for read-modify-write sequences.

Invariants:
    - All roster mutations and step submissions for a team run under that team's lock
    - Locks are created lazily and never removed while the process lives
    - Acquiring two team locks always happens in sorted id order (no lock-order inversion)

Design Decisions:
    - Module-level dict: same single-process assumption as the rest of the in-memory
      state; cross-process safety comes from the conditional/atomic UPDATEs issued
      inside the lock, not from the lock itself
"""

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Iterable
from devstep.core.domain_types import TeamId

_team_locks: dict[TeamId, asyncio.Lock] = {}


def get_team_lock(team_id: TeamId) -> asyncio.Lock:
    lock = _team_locks.get(team_id)
    if lock is None:
        lock = _team_locks[team_id] = asyncio.Lock()
    return lock


@asynccontextmanager
async def team_locks(team_ids: Iterable[TeamId]) -> AsyncIterator[None]:
    """Hold the locks of every given team for the duration of the block."""
    async with AsyncExitStack() as stack:
        for team_id in sorted(set(team_ids), key=str):
            await stack.enter_async_context(get_team_lock(team_id))
        yield
