"""GraphQL Types — output types, inputs and payloads of the Packstation schema."""

from datetime import date, datetime

import strawberry

from app.infrastructure.keycloak_client import TokenResult as KeycloakTokenResult
from app.models import packstation as packstation_model


@strawberry.type
class Adresse:
    strasse: str
    hausnummer: str
    postleitzahl: str
    stadt: str


@strawberry.type
class Paket:
    nummer: str
    max_gewicht_in_kg: float


@strawberry.type
class Packstation:
    id: int
    version: int
    nummer: str
    baudatum: date | None
    ausstattung: list[str] | None
    adresse: Adresse | None
    pakete: list[Paket]
    erzeugt: datetime | None
    aktualisiert: datetime | None

    @classmethod
    def from_model(cls, model: packstation_model.Packstation) -> "Packstation":
        adresse = model.adresse
        return cls(
            id=model.id,
            version=model.version,
            nummer=model.nummer,
            baudatum=model.baudatum,
            ausstattung=model.ausstattung,
            adresse=Adresse(
                strasse=adresse.strasse,
                hausnummer=adresse.hausnummer,
                postleitzahl=adresse.postleitzahl,
                stadt=adresse.stadt,
            ) if adresse is not None else None,
            pakete=[
                Paket(nummer=p.nummer, max_gewicht_in_kg=p.max_gewicht_in_kg)
                for p in model.pakete
            ],
            erzeugt=model.erzeugt,
            aktualisiert=model.aktualisiert,
        )


@strawberry.input
class AdresseInput:
    strasse: str
    hausnummer: str
    postleitzahl: str
    stadt: str


@strawberry.input
class PaketInput:
    nummer: str
    max_gewicht_in_kg: float


@strawberry.input
class PackstationInput:
    nummer: str
    adresse: AdresseInput
    baudatum: date | None = None
    ausstattung: list[str] | None = None
    pakete: list[PaketInput] | None = None


@strawberry.input
class PackstationUpdateInput:
    id: strawberry.ID
    version: int
    nummer: str
    baudatum: date | None = None
    ausstattung: list[str] | None = None


@strawberry.input
class SuchkriterienInput:
    nummer: str | None = None
    stadt: str | None = None
    postleitzahl: str | None = None


@strawberry.type
class CreatePayload:
    id: int


@strawberry.type
class UpdatePayload:
    version: int


@strawberry.type
class TokenResult:
    access_token: str
    expires_in: int
    refresh_token: str
    refresh_expires_in: int

    @classmethod
    def from_keycloak(cls, result: KeycloakTokenResult) -> "TokenResult":
        return cls(
            access_token=result.access_token,
            expires_in=result.expires_in,
            refresh_token=result.refresh_token,
            refresh_expires_in=result.refresh_expires_in,
        )
