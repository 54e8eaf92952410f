"""Packstation Schemas — DTOs with field-level validation for API boundaries.

Invariants:
    - PackstationDTO carries the full aggregate (adresse required, pakete optional) for create
    - PackstationDtoOhneRef carries only the root's own fields for update
    - Never contain id or version: both are assigned by persistence
    - postleitzahl is exactly 5 digits; maxGewichtInKg is positive

Design Decisions:
    - populate_by_name=True: DTOs accept both the JSON alias and the Python field name
    - Response models built explicitly by the mapper, not via from_attributes
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

NUMMER_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9-]*$"


class AdresseDTO(BaseModel):
    """Address of a new Packstation."""
    strasse: str = Field(min_length=1, max_length=64)
    hausnummer: str = Field(min_length=1, max_length=8)
    postleitzahl: str = Field(pattern=r"^\d{5}$")
    stadt: str = Field(min_length=1, max_length=64)

    @field_validator("strasse", "hausnummer", "stadt")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class PaketDTO(BaseModel):
    """Parcel compartment of a new Packstation."""
    model_config = ConfigDict(populate_by_name=True)

    nummer: str = Field(min_length=1, max_length=32)
    max_gewicht_in_kg: float = Field(alias="maxGewichtInKg", gt=0)


class PackstationDtoOhneRef(BaseModel):
    """Packstation fields without adresse and pakete (update body)."""
    model_config = ConfigDict(populate_by_name=True)

    nummer: str = Field(min_length=1, max_length=32, pattern=NUMMER_PATTERN)
    baudatum: date | None = None
    ausstattung: list[str] | None = None

    @field_validator("ausstattung")
    @classmethod
    def strip_ausstattung(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        items = [item.strip() for item in v]
        if any(not item for item in items):
            raise ValueError("ausstattung cannot contain empty entries")
        return items


class PackstationDTO(PackstationDtoOhneRef):
    """Full Packstation aggregate (create body)."""
    adresse: AdresseDTO
    pakete: list[PaketDTO] | None = None


class Suchkriterien(BaseModel):
    """Optional search filters for listing Packstationen."""
    nummer: str | None = None
    stadt: str | None = None
    postleitzahl: str | None = None

    def is_empty(self) -> bool:
        return not (self.nummer or self.stadt or self.postleitzahl)


# --- Responses ----------------------------------------------------------------

class Link(BaseModel):
    href: str


class Links(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    self_: Link = Field(alias="self")


class AdresseResponse(BaseModel):
    strasse: str
    hausnummer: str
    postleitzahl: str
    stadt: str


class PaketResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nummer: str
    max_gewicht_in_kg: float = Field(alias="maxGewichtInKg")


class PackstationResponse(BaseModel):
    """Packstation as returned by the read endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    version: int
    nummer: str
    baudatum: date | None = None
    ausstattung: list[str] | None = None
    adresse: AdresseResponse | None = None
    pakete: list[PaketResponse] = []
    erzeugt: datetime | None = None
    aktualisiert: datetime | None = None
    links: Links = Field(alias="_links")


class PackstationListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    packstationen: list[PackstationResponse]
    links: Links = Field(alias="_links")
