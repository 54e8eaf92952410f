"""Packstation Mapper — conversions between DTOs and ORM entities.

Invariants:
    - Entities built from DTOs are transient: no id, no version
    - Back-references (adresse.packstation, paket.packstation) point at the new root
    - DTO-without-references yields a root with neither adresse nor pakete
"""

from datetime import datetime, timezone

from app.models.adresse import Adresse
from app.models.packstation import Packstation
from app.models.paket import Paket
from app.schemas.packstation import (
    AdresseResponse,
    Link,
    Links,
    PackstationDTO,
    PackstationDtoOhneRef,
    PackstationResponse,
    PaketResponse,
)


def packstation_dto_to_packstation(dto: PackstationDTO) -> Packstation:
    """Build a new Packstation aggregate from a create DTO."""
    now = datetime.now(timezone.utc)
    adresse = Adresse(
        strasse=dto.adresse.strasse,
        hausnummer=dto.adresse.hausnummer,
        postleitzahl=dto.adresse.postleitzahl,
        stadt=dto.adresse.stadt,
    )
    pakete = [
        Paket(nummer=paket.nummer, max_gewicht_in_kg=paket.max_gewicht_in_kg)
        for paket in dto.pakete or []
    ]
    packstation = Packstation(
        nummer=dto.nummer,
        baudatum=dto.baudatum,
        ausstattung=dto.ausstattung,
        erzeugt=now,
        aktualisiert=now,
    )
    # Rueckwaertsverweise
    adresse.packstation = packstation
    for paket in pakete:
        paket.packstation = packstation
    return packstation


def packstation_dto_ohne_ref_to_packstation(dto: PackstationDtoOhneRef) -> Packstation:
    """Build the changed root fields of an update."""
    return Packstation(
        nummer=dto.nummer,
        baudatum=dto.baudatum,
        ausstattung=dto.ausstattung,
        aktualisiert=datetime.now(timezone.utc),
    )


def packstation_to_response(packstation: Packstation, base_uri: str) -> PackstationResponse:
    """Build the read representation, with a self link below base_uri."""
    adresse = packstation.adresse
    return PackstationResponse(
        id=packstation.id,
        version=packstation.version,
        nummer=packstation.nummer,
        baudatum=packstation.baudatum,
        ausstattung=packstation.ausstattung,
        adresse=AdresseResponse(
            strasse=adresse.strasse,
            hausnummer=adresse.hausnummer,
            postleitzahl=adresse.postleitzahl,
            stadt=adresse.stadt,
        ) if adresse is not None else None,
        pakete=[
            PaketResponse(nummer=p.nummer, max_gewicht_in_kg=p.max_gewicht_in_kg)
            for p in packstation.pakete
        ],
        erzeugt=packstation.erzeugt,
        aktualisiert=packstation.aktualisiert,
        links=Links(self_=Link(href=f"{base_uri}/{packstation.id}")),
    )
