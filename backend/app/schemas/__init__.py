"""Pydantic Schemas — request/response validation for the REST API.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - JSON field names follow the public API (camelCase where the API uses it)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
