"""Infrastructure Layer — database sessions, per-team locks, logging setup.

Invariants:
    - The only layer that touches the engine, the event loop primitives and log handlers
"""
