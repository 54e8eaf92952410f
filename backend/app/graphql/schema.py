"""GraphQL Schema — queries, mutations and the FastAPI router.

Invariants:
    - Queries and token/refresh are public, also when the request carries a rejected token
    - create/update require role admin or user; delete requires admin
    - update carries id and version in its input (no If-Match header in GraphQL)
    - PackstationError → GraphQLError(message, extensions={"code": ...})
    - Input that fails DTO validation → BAD_USER_INPUT with field details

Design Decisions:
    - Context built by a FastAPI dependency: same get_db / user / Keycloak dependencies as REST
"""

import logging
from contextlib import contextmanager

import strawberry
from fastapi import Depends
from graphql import GraphQLError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from app.api.error_handlers import format_validation_details
from app.api.security import Authentication, ensure_roles, get_authentication
from app.core.errors import BadUserInputError, PackstationError
from app.core.versioning import format_etag
from app.graphql.types import (
    CreatePayload,
    Packstation,
    PackstationInput,
    PackstationUpdateInput,
    SuchkriterienInput,
    TokenResult,
    UpdatePayload,
)
from app.infrastructure.database import get_db
from app.infrastructure.keycloak_client import KeycloakClient, get_keycloak_client
from app.schemas.packstation import (
    PackstationDTO,
    PackstationDtoOhneRef,
    Suchkriterien,
)
from app.services.packstation_mapper import (
    packstation_dto_ohne_ref_to_packstation,
    packstation_dto_to_packstation,
)
from app.services.packstation_read_service import PackstationReadService
from app.services.packstation_write_service import PackstationWriteService

logger = logging.getLogger(__name__)


def to_graphql_error(exc: PackstationError) -> GraphQLError:
    extensions = {"code": exc.code}
    if isinstance(exc, BadUserInputError) and exc.details:
        extensions["details"] = exc.details
    return GraphQLError(exc.message, extensions=extensions)


@contextmanager
def graphql_errors():
    """Re-raise domain errors as GraphQL errors."""
    try:
        yield
    except PackstationError as e:
        logger.info(
            f"GraphQL error: {e.message}",
            extra={"error_code": e.code, "packstation_id": e.context.packstation_id},
        )
        raise to_graphql_error(e) from e


def _validate(model: type[BaseModel], data: dict) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise BadUserInputError(
            "Fehlerhafte Packstationdaten",
            details=format_validation_details(e.errors()),
        ) from e


def _require_roles(info: Info, roles: tuple[str, ...]) -> None:
    ensure_roles(info.context["user"], roles, info.context["auth_error"])


def _parse_id(value: strawberry.ID) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise BadUserInputError(f"Ungueltige ID {value}") from e


@strawberry.type
class Query:
    @strawberry.field
    async def packstation(self, info: Info, id: strawberry.ID) -> Packstation:
        with graphql_errors():
            packstation = await PackstationReadService(
                info.context["db"],
            ).find_by_id(_parse_id(id))
        return Packstation.from_model(packstation)

    @strawberry.field
    async def packstationen(
        self, info: Info, suchkriterien: SuchkriterienInput | None = None,
    ) -> list[Packstation]:
        kriterien = Suchkriterien(**strawberry.asdict(suchkriterien)) if suchkriterien else None
        with graphql_errors():
            packstationen = await PackstationReadService(
                info.context["db"],
            ).find(kriterien)
        return [Packstation.from_model(p) for p in packstationen]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create(self, info: Info, input: PackstationInput) -> CreatePayload:
        with graphql_errors():
            _require_roles(info, ("admin", "user"))
            dto = _validate(PackstationDTO, strawberry.asdict(input))
            packstation_id = await PackstationWriteService(
                info.context["db"],
            ).create(packstation_dto_to_packstation(dto))
        return CreatePayload(id=packstation_id)

    @strawberry.mutation
    async def update(self, info: Info, input: PackstationUpdateInput) -> UpdatePayload:
        with graphql_errors():
            _require_roles(info, ("admin", "user"))
            packstation_id = _parse_id(input.id)
            dto = _validate(PackstationDtoOhneRef, {
                "nummer": input.nummer,
                "baudatum": input.baudatum,
                "ausstattung": input.ausstattung,
            })
            version = await PackstationWriteService(info.context["db"]).update(
                packstation_id,
                packstation_dto_ohne_ref_to_packstation(dto),
                format_etag(input.version),
            )
        return UpdatePayload(version=version)

    @strawberry.mutation
    async def delete(self, info: Info, id: strawberry.ID) -> bool:
        with graphql_errors():
            _require_roles(info, ("admin",))
            return await PackstationWriteService(
                info.context["db"],
            ).delete(_parse_id(id))

    @strawberry.mutation
    async def token(self, info: Info, username: str, password: str) -> TokenResult:
        with graphql_errors():
            result = await info.context["keycloak"].token(username, password)
        return TokenResult.from_keycloak(result)

    @strawberry.mutation
    async def refresh(self, info: Info, refresh_token: str) -> TokenResult:
        with graphql_errors():
            result = await info.context["keycloak"].refresh(refresh_token)
        return TokenResult.from_keycloak(result)


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(
    db: AsyncSession = Depends(get_db),
    auth: Authentication = Depends(get_authentication),
    keycloak: KeycloakClient = Depends(get_keycloak_client),
) -> dict:
    return {
        "db": db,
        "user": auth.user,
        "auth_error": auth.error,
        "keycloak": keycloak,
    }


graphql_router = GraphQLRouter(schema, context_getter=get_context)
