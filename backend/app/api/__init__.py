"""API Layer — FastAPI routes, security dependencies, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All error responses share the PackstationError envelope

Design Decisions:
    - Thin routes: DTO conversion and HTTP headers here, rules in services/
"""
