"""Keycloak Client — token issuance passthrough and bearer-token verification.

Invariants:
    - Tokens are issued by Keycloak only; this client forwards password and refresh grants
    - Bearer tokens are RS256 JWTs verified against the realm JWKS and issuer
    - JWKS cached per URL for keycloak_jwks_ttl_seconds
    - A token whose kid is missing from the cached JWKS triggers one refetch (key rotation),
      at most once per jwks_min_refresh_seconds
    - Rejected credentials (400/401 from Keycloak) → BadUserInputError
    - Unreachable Keycloak or unexpected answers → IdentityProviderError

Design Decisions:
    - Roles merged from realm_access and resource_access[client_id]: both kinds grant access
    - Audience not verified: Keycloak access tokens carry "account" as audience by default
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
from cachetools import TTLCache
from jose import JWTError, jwt

from app.config import Settings
from app.core.errors import (
    BadUserInputError,
    IdentityProviderError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


@dataclass
class VerifiedUser:
    """Identity extracted from a verified Keycloak access token."""
    sub: str
    username: str
    roles: frozenset[str] = frozenset()
    claims: dict[str, Any] = field(default_factory=dict)

    def has_any_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


@dataclass
class TokenResult:
    access_token: str
    expires_in: int
    refresh_token: str
    refresh_expires_in: int


class KeycloakClient:
    """Async client for one Keycloak realm."""

    def __init__(
        self,
        base_url: str,
        realm: str,
        client_id: str,
        client_secret: str,
        timeout_seconds: float = 10.0,
        jwks_ttl_seconds: int = 3600,
        jwks_min_refresh_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.issuer = f"{base_url.rstrip('/')}/realms/{realm}"
        self.token_url = f"{self.issuer}/protocol/openid-connect/token"
        self.jwks_url = f"{self.issuer}/protocol/openid-connect/certs"
        self.client_id = client_id
        self.client_secret = client_secret
        self._http = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)
        self._jwks_cache: TTLCache[str, dict[str, Any]] = TTLCache(
            maxsize=4, ttl=jwks_ttl_seconds,
        )
        self._jwks_min_refresh_seconds = jwks_min_refresh_seconds
        self._jwks_fetched_at: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "KeycloakClient":
        return cls(
            base_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
            timeout_seconds=settings.keycloak_timeout_seconds,
            jwks_ttl_seconds=settings.keycloak_jwks_ttl_seconds,
        )

    async def token(self, username: str, password: str) -> TokenResult:
        """Exchange username and password for tokens (password grant)."""
        logger.debug(f"token: username={username}")
        return await self._request_token({
            "grant_type": "password",
            "username": username,
            "password": password,
        })

    async def refresh(self, refresh_token: str) -> TokenResult:
        """Exchange a refresh token for new tokens."""
        logger.debug("refresh")
        return await self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })

    async def verify(self, token: str) -> VerifiedUser:
        """Verify a bearer token and extract subject, username and roles."""
        if not token:
            raise UnauthorizedError()
        jwks = await self._jwks_for(token)
        try:
            claims = jwt.decode(
                token,
                jwks,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except JWTError as e:
            logger.info(f"Token rejected: {e}")
            raise UnauthorizedError() from e

        sub = str(claims.get("sub") or "")
        if not sub:
            raise UnauthorizedError("Token ohne Subject")

        return VerifiedUser(
            sub=sub,
            username=str(claims.get("preferred_username") or sub),
            roles=self._extract_roles(claims),
            claims=claims,
        )

    async def close(self) -> None:
        await self._http.aclose()

    def _extract_roles(self, claims: dict[str, Any]) -> frozenset[str]:
        realm_roles = (claims.get("realm_access") or {}).get("roles") or []
        client_access = (claims.get("resource_access") or {}).get(self.client_id) or {}
        client_roles = client_access.get("roles") or []
        return frozenset(str(role) for role in [*realm_roles, *client_roles])

    async def _jwks_for(self, token: str) -> dict[str, Any]:
        """Cached JWKS, refetched once if it lacks the key id named in the token header."""
        jwks = await self._get_jwks()
        try:
            kid = jwt.get_unverified_header(token).get("kid")
        except JWTError as e:
            logger.info(f"Token rejected: {e}")
            raise UnauthorizedError() from e

        known = {key.get("kid") for key in jwks.get("keys", [])}
        if kid is None or kid in known or not self._may_refetch_jwks():
            return jwks

        logger.info(f"Unknown key id {kid}, refetching JWKS")
        self._jwks_cache.pop(self.jwks_url, None)
        return await self._get_jwks()

    def _may_refetch_jwks(self) -> bool:
        if self._jwks_fetched_at is None:
            return True
        return time.monotonic() - self._jwks_fetched_at >= self._jwks_min_refresh_seconds

    async def _get_jwks(self) -> dict[str, Any]:
        cached = self._jwks_cache.get(self.jwks_url)
        if cached:
            return cached
        try:
            response = await self._http.get(self.jwks_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"JWKS fetch failed: {e}")
            raise IdentityProviderError("JWKS not available") from e
        jwks = response.json()
        self._jwks_cache[self.jwks_url] = jwks
        self._jwks_fetched_at = time.monotonic()
        return jwks

    async def _request_token(self, form: dict[str, str]) -> TokenResult:
        form = {
            **form,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            response = await self._http.post(
                self.token_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request failed: {e}")
            raise IdentityProviderError("Keycloak not reachable") from e

        if response.status_code in (400, 401):
            logger.info(f"Token request rejected: {response.status_code}")
            raise BadUserInputError(
                "Falscher Benutzername und/oder falsches Passwort",
            )
        if response.status_code != 200:
            raise IdentityProviderError(
                f"unexpected status {response.status_code}", response.status_code,
            )

        body = response.json()
        return TokenResult(
            access_token=body["access_token"],
            expires_in=int(body.get("expires_in", 0)),
            refresh_token=body.get("refresh_token", ""),
            refresh_expires_in=int(body.get("refresh_expires_in", 0)),
        )


# Singleton (initialized on startup)
keycloak_client: KeycloakClient | None = None


def init_keycloak(settings: Settings) -> None:
    global keycloak_client
    keycloak_client = KeycloakClient.from_settings(settings)


async def close_keycloak() -> None:
    global keycloak_client
    if keycloak_client:
        await keycloak_client.close()
        keycloak_client = None


def get_keycloak_client() -> KeycloakClient:
    """FastAPI dependency for the Keycloak client."""
    if not keycloak_client:
        raise RuntimeError("Keycloak client not initialized")
    return keycloak_client
