"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic ("today" is always passed in)

Design Decisions:
    - Functional core separated from imperative shell: ledger, aggregation and
      projection rules are plain functions over structural protocols
"""
