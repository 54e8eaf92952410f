"""Services Layer — read and write access to the Packstation aggregate.

Invariants:
    - Services take an AsyncSession and raise PackstationError subclasses, never HTTP errors
    - Reads and writes split into separate classes

Design Decisions:
    - Mapping between DTOs and ORM entities lives in its own module, shared by REST and GraphQL
"""
