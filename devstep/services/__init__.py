"""Services — imperative shell that loads state, calls the pure core, and persists results.

Invariants:
    - Services raise DevStepError subclasses; they never build HTTP responses
    - Every write path commits exactly once per request (batch entries use savepoints)

Design Decisions:
    - One class per resource with the request's AsyncSession injected (max ~6 methods per class)
"""
