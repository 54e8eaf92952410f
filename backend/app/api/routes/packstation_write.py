"""Packstation Write Routes — create, update and delete over REST.

Invariants:
    - POST → 201 with Location <base-uri>/<id>, empty body
    - PUT without If-Match → 428; malformed or stale version → 412; success → 204 with ETag
    - DELETE → 204 whether or not the Packstation existed
    - POST/PUT require role admin or user; DELETE requires admin

Design Decisions:
    - Version header checked here (HTTP concern), version value checked by the service
"""

import logging

from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.base_uri import get_base_uri
from app.api.security import require_roles
from app.core.errors import ErrorContext, VersionMissingError
from app.core.versioning import format_etag
from app.infrastructure.database import get_db
from app.infrastructure.keycloak_client import VerifiedUser
from app.schemas.packstation import PackstationDTO, PackstationDtoOhneRef
from app.services.packstation_mapper import (
    packstation_dto_ohne_ref_to_packstation,
    packstation_dto_to_packstation,
)
from app.services.packstation_write_service import PackstationWriteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/packstationen", tags=["Packstation REST-API"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Eine neue Packstation anlegen",
    responses={
        400: {"description": "Fehlerhafte Packstationdaten"},
        422: {"description": "Nummer existiert bereits"},
    },
)
async def create_packstation(
    body: PackstationDTO,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: VerifiedUser = Depends(require_roles("admin", "user")),
):
    """Create a Packstation with its Adresse and Pakete."""
    logger.debug(f"post: packstationDTO={body}")
    packstation = packstation_dto_to_packstation(body)
    packstation_id = await PackstationWriteService(db).create(packstation)

    location = f"{get_base_uri(request)}/{packstation_id}"
    logger.debug(f"post: location={location}")
    return Response(
        status_code=status.HTTP_201_CREATED, headers={"Location": location},
    )


@router.put(
    "/{packstation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eine vorhandene Packstation aktualisieren",
    responses={
        400: {"description": "Fehlerhafte Packstationdaten"},
        404: {"description": "Packstation nicht gefunden"},
        412: {"description": 'Falsche Version im Header "If-Match"'},
        422: {"description": "Nummer existiert bereits"},
        428: {"description": 'Header "If-Match" fehlt'},
    },
)
async def update_packstation(
    packstation_id: int,
    body: PackstationDtoOhneRef,
    if_match: str | None = Header(None, alias="If-Match"),
    db: AsyncSession = Depends(get_db),
    user: VerifiedUser = Depends(require_roles("admin", "user")),
):
    """Update nummer, baudatum and ausstattung; If-Match must carry the current version."""
    logger.debug(
        f"put: id={packstation_id}, packstationDTO={body}, version={if_match}",
    )
    if if_match is None:
        raise VersionMissingError(ErrorContext(packstation_id=packstation_id))

    packstation = packstation_dto_ohne_ref_to_packstation(body)
    neue_version = await PackstationWriteService(db).update(
        packstation_id, packstation, if_match,
    )
    logger.debug(f"put: version={neue_version}")
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={"ETag": format_etag(neue_version)},
    )


@router.delete(
    "/{packstation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Packstation mit der ID loeschen",
)
async def delete_packstation(
    packstation_id: int,
    db: AsyncSession = Depends(get_db),
    user: VerifiedUser = Depends(require_roles("admin")),
):
    """Delete a Packstation; also 204 if it did not exist."""
    logger.debug(f"delete: id={packstation_id}")
    await PackstationWriteService(db).delete(packstation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
