"""Packstation Read Routes — lookup by id and search over REST.

Invariants:
    - GET /{id} → 200 with ETag "<version>"; If-None-Match equal to that ETag → 304 without body
    - GET with query parameters → all matches; no match → 404
    - Read routes are public
"""

import logging

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.base_uri import get_base_uri
from app.core.versioning import format_etag
from app.infrastructure.database import get_db
from app.schemas.packstation import (
    Link,
    Links,
    PackstationListResponse,
    PackstationResponse,
    Suchkriterien,
)
from app.services.packstation_mapper import packstation_to_response
from app.services.packstation_read_service import PackstationReadService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/packstationen", tags=["Packstation REST-API"])


@router.get(
    "/{packstation_id}",
    response_model=PackstationResponse,
    summary="Suche mit der Packstation-ID",
    responses={
        304: {"description": "Die Packstation wurde bereits heruntergeladen"},
        404: {"description": "Keine Packstation mit der ID gefunden"},
    },
)
async def get_packstation(
    packstation_id: int,
    request: Request,
    response: Response,
    if_none_match: str | None = Header(None, alias="If-None-Match"),
    db: AsyncSession = Depends(get_db),
):
    """Get one Packstation; honours If-None-Match."""
    logger.debug(f"get_by_id: id={packstation_id}, version={if_none_match}")
    packstation = await PackstationReadService(db).find_by_id(packstation_id)

    etag = format_etag(packstation.version)
    if if_none_match == etag:
        logger.debug("get_by_id: not modified")
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)

    response.headers["ETag"] = etag
    return packstation_to_response(packstation, get_base_uri(request))


@router.get(
    "",
    response_model=PackstationListResponse,
    summary="Suche mit Suchkriterien",
    responses={404: {"description": "Keine Packstationen gefunden"}},
)
async def list_packstationen(
    request: Request,
    nummer: str | None = Query(None),
    stadt: str | None = Query(None),
    postleitzahl: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Search Packstationen; without parameters all are returned."""
    suchkriterien = Suchkriterien(
        nummer=nummer, stadt=stadt, postleitzahl=postleitzahl,
    )
    logger.debug(f"get: suchkriterien={suchkriterien}")
    packstationen = await PackstationReadService(db).find(suchkriterien)

    base_uri = get_base_uri(request)
    return PackstationListResponse(
        packstationen=[packstation_to_response(p, base_uri) for p in packstationen],
        links=Links(self_=Link(href=base_uri)),
    )
