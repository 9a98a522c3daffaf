"""API Schemas — Pydantic request/response models for the HTTP boundary.

Invariants:
    - Field-level shape/range checks live here; cross-field business rules live in core/
    - Response models are built from ORM rows or core dataclasses via from_* classmethods
"""
