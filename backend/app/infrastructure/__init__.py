"""Infrastructure Layer — database sessions, Keycloak client, logging setup.

Invariants:
    - Infrastructure modules hold the process singletons, initialized in the FastAPI lifespan
    - External failures are mapped to PackstationError subclasses before leaving this layer
"""
