"""Core Layer — domain errors and pure helpers, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, graphql/, infrastructure/, or db/
    - All functions are pure and deterministic
"""
