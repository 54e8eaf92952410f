"""Packstation Read Service — lookup by id and filtered search.

Invariants:
    - Results always carry adresse and pakete (selectin-loaded)
    - An unknown id and an empty search both raise PackstationNotFoundError
    - Search results are ordered by id
    - stadt matches case-insensitively as a literal substring (% and _ are not wildcards)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PackstationNotFoundError
from app.models.adresse import Adresse
from app.models.packstation import Packstation
from app.schemas.packstation import Suchkriterien

logger = logging.getLogger(__name__)


class PackstationReadService:
    """Read access to Packstation aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, packstation_id: int) -> Packstation:
        logger.debug(f"find_by_id: id={packstation_id}")
        result = await self.db.execute(
            select(Packstation).where(Packstation.id == packstation_id),
        )
        packstation = result.scalar_one_or_none()
        if packstation is None:
            raise PackstationNotFoundError(packstation_id)
        return packstation

    async def find(self, suchkriterien: Suchkriterien | None = None) -> list[Packstation]:
        """Find all Packstationen matching every given criterion."""
        logger.debug(f"find: suchkriterien={suchkriterien}")
        query = select(Packstation).order_by(Packstation.id)

        if suchkriterien is not None and not suchkriterien.is_empty():
            if suchkriterien.nummer:
                query = query.where(Packstation.nummer == suchkriterien.nummer)
            if suchkriterien.stadt or suchkriterien.postleitzahl:
                query = query.join(Packstation.adresse)
            if suchkriterien.stadt:
                query = query.where(
                    Adresse.stadt.icontains(suchkriterien.stadt, autoescape=True),
                )
            if suchkriterien.postleitzahl:
                query = query.where(
                    Adresse.postleitzahl == suchkriterien.postleitzahl,
                )

        result = await self.db.execute(query)
        packstationen = list(result.scalars().all())
        if not packstationen:
            raise PackstationNotFoundError()
        return packstationen
