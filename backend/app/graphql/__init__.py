"""GraphQL Layer — strawberry schema mounted on FastAPI at /graphql.

Invariants:
    - Resolvers reuse the REST DTOs, mapper and services (no second write path)
    - Domain errors surface as GraphQL errors with extensions.code
"""
