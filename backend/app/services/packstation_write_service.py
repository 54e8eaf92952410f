"""Packstation Write Service — create, update and delete with optimistic locking.

Invariants:
    - nummer is unique: checked before insert/update, and a unique violation at commit
      is reported as PackstationNummerExistsError
    - update only succeeds if the client's version equals the persisted version
    - update touches nummer, baudatum, ausstattung, aktualisiert only
    - delete is idempotent: a missing id is not an error

Design Decisions:
    - Explicit version comparison before flush gives a precise error; the ORM's
      version_id_col catches a concurrent writer between load and flush (StaleDataError)
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    ErrorContext,
    PackstationNotFoundError,
    PackstationNummerExistsError,
    VersionOutdatedError,
)
from app.core.versioning import parse_version
from app.models.packstation import Packstation

logger = logging.getLogger(__name__)


class PackstationWriteService:
    """Write access to Packstation aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, packstation: Packstation) -> int:
        """Persist a new Packstation with its Adresse and Pakete, return the new id."""
        logger.debug(f"create: packstation={packstation!r}")
        await self._validate_create(packstation)

        self.db.add(packstation)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"create: unique constraint violated: {e}")
            raise PackstationNummerExistsError(packstation.nummer) from e

        logger.info(
            f"Packstation {packstation.id} created",
            extra={"packstation_id": packstation.id},
        )
        return packstation.id

    async def update(
        self, packstation_id: int, packstation: Packstation, version: str,
    ) -> int:
        """Apply the root fields of `packstation` to the stored record, return the new version."""
        logger.debug(
            f"update: id={packstation_id}, packstation={packstation!r}, version={version}",
        )
        current = await self._validate_update(packstation, packstation_id, version)

        expected_version = current.version
        current.nummer = packstation.nummer
        current.baudatum = packstation.baudatum
        current.ausstattung = packstation.ausstattung
        current.aktualisiert = packstation.aktualisiert

        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"update: concurrent modification of {packstation_id}")
            raise VersionOutdatedError(
                expected_version, ErrorContext(packstation_id=packstation_id),
            ) from e
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"update: unique constraint violated: {e}")
            raise PackstationNummerExistsError(packstation.nummer) from e

        logger.info(
            f"Packstation {packstation_id} updated",
            extra={"packstation_id": packstation_id, "version": current.version},
        )
        return current.version

    async def delete(self, packstation_id: int) -> bool:
        """Delete the Packstation with its Adresse and Pakete. False if it did not exist."""
        logger.debug(f"delete: id={packstation_id}")
        packstation = await self._find(packstation_id)
        if packstation is None:
            return False

        await self.db.delete(packstation)
        await self.db.commit()
        logger.info(
            f"Packstation {packstation_id} deleted",
            extra={"packstation_id": packstation_id},
        )
        return True

    async def _find(self, packstation_id: int) -> Packstation | None:
        result = await self.db.execute(
            select(Packstation).where(Packstation.id == packstation_id),
        )
        return result.scalar_one_or_none()

    async def _nummer_taken(self, nummer: str, exclude_id: int | None = None) -> bool:
        query = select(Packstation.id).where(Packstation.nummer == nummer)
        if exclude_id is not None:
            query = query.where(Packstation.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def _validate_create(self, packstation: Packstation) -> None:
        if await self._nummer_taken(packstation.nummer):
            raise PackstationNummerExistsError(packstation.nummer)

    async def _validate_update(
        self, packstation: Packstation, packstation_id: int, version_token: str,
    ) -> Packstation:
        version = parse_version(version_token)
        logger.debug(f"_validate_update: version={version}")

        current = await self._find(packstation_id)
        if current is None:
            raise PackstationNotFoundError(packstation_id)

        if version != current.version:
            logger.debug(
                f"_validate_update: version={version}, current={current.version}",
            )
            raise VersionOutdatedError(
                version, ErrorContext(packstation_id=packstation_id),
            )

        if packstation.nummer != current.nummer and await self._nummer_taken(
            packstation.nummer, exclude_id=packstation_id,
        ):
            raise PackstationNummerExistsError(packstation.nummer)
        return current
