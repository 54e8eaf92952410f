"""Packstation Application Package — REST and GraphQL service for parcel lockers.

Invariants:
    - Layers: api/graphql → services → models; core has no framework imports
    - Empty __init__.py: explicit imports only, no star exports
"""
