"""Database Layer — declarative Base and a standalone async session factory.

Invariants:
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for the test suite
"""
