"""ORM Models — SQLAlchemy declarative models for the Packstation aggregate.

Invariants:
    - All models inherit from Base (db/base.py)
    - Packstation is the aggregate root; Adresse and Paket are scoped by packstation_id

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.packstation import Packstation  # noqa: F401
from app.models.adresse import Adresse  # noqa: F401
from app.models.paket import Paket  # noqa: F401
