"""Security Dependencies — bearer-token authentication and role checks.

Invariants:
    - get_authentication never raises UnauthorizedError; a rejected token is kept in `error`
    - get_optional_user: no Authorization header → None; invalid token → UnauthorizedError
    - get_current_user: requires a verified user
    - require_roles(*roles): user must hold at least one of the roles, else ForbiddenError

Design Decisions:
    - HTTPBearer(auto_error=False): the missing-token case is reported by our own error envelope
    - ensure_roles is a plain function so the GraphQL resolvers reuse the same rule
"""

import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import ForbiddenError, UnauthorizedError
from app.infrastructure.keycloak_client import (
    KeycloakClient,
    VerifiedUser,
    get_keycloak_client,
)

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Authentication:
    """Outcome of reading the bearer token: a user, a rejection, or neither."""
    user: VerifiedUser | None = None
    error: UnauthorizedError | None = None


async def get_authentication(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    keycloak: KeycloakClient = Depends(get_keycloak_client),
) -> Authentication:
    if credentials is None:
        return Authentication()
    try:
        return Authentication(user=await keycloak.verify(credentials.credentials))
    except UnauthorizedError as e:
        return Authentication(error=e)


async def get_optional_user(
    auth: Authentication = Depends(get_authentication),
) -> VerifiedUser | None:
    if auth.error is not None:
        raise auth.error
    return auth.user


async def get_current_user(
    user: VerifiedUser | None = Depends(get_optional_user),
) -> VerifiedUser:
    if user is None:
        raise UnauthorizedError()
    return user


def ensure_roles(
    user: VerifiedUser | None,
    roles: tuple[str, ...],
    rejection: UnauthorizedError | None = None,
) -> VerifiedUser:
    """Return the user if it holds any of `roles`; without a user, raise `rejection` if given."""
    if user is None:
        raise rejection or UnauthorizedError()
    if not user.has_any_role(*roles):
        logger.info(
            f"Missing role: one of {roles} required",
            extra={"username": user.username},
        )
        raise ForbiddenError(roles)
    return user


def require_roles(*roles: str):
    """Build a dependency that enforces any of the given roles."""

    async def dependency(
        user: VerifiedUser = Depends(get_current_user),
    ) -> VerifiedUser:
        return ensure_roles(user, roles)

    return dependency
