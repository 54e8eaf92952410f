"""API test fixtures — async DB, fake identity provider and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden to use the test DB session factory
    - get_keycloak_client overridden with FakeKeycloak (no network)
    - get_authentication overridden per client: admin, user-role, or anonymous
    - bearer_client keeps the real bearer dependencies; FakeKeycloak.verify decides

Design Decisions:
    - StaticPool: all sessions share the single in-memory connection
"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from app.api.security import Authentication, get_authentication
from app.core.errors import BadUserInputError, UnauthorizedError
from app.db.base import Base
from app.infrastructure.database import get_db
from app.infrastructure.keycloak_client import (
    TokenResult,
    VerifiedUser,
    get_keycloak_client,
)
from app.main import app
from app.models.adresse import Adresse
from app.models.packstation import Packstation
from app.models.paket import Paket

ADMIN = VerifiedUser(sub="1", username="admin", roles=frozenset({"admin", "user"}))
USER = VerifiedUser(sub="2", username="user", roles=frozenset({"user"}))
GUEST = VerifiedUser(sub="3", username="guest", roles=frozenset())

BEARER_TOKENS = {"admin-token": ADMIN, "user-token": USER, "guest-token": GUEST}


class FakeKeycloak:
    """Stands in for KeycloakClient; accepts admin/p and the bearer tokens in BEARER_TOKENS."""

    async def token(self, username: str, password: str) -> TokenResult:
        if (username, password) != ("admin", "p"):
            raise BadUserInputError("Falscher Benutzername und/oder falsches Passwort")
        return TokenResult("access-1", 300, "refresh-1", 1800)

    async def refresh(self, refresh_token: str) -> TokenResult:
        if refresh_token != "refresh-1":
            raise BadUserInputError("Falscher Token")
        return TokenResult("access-2", 300, "refresh-2", 1800)

    async def verify(self, token: str) -> VerifiedUser:
        user = BEARER_TOKENS.get(token)
        if user is None:
            raise UnauthorizedError()
        return user


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


_REAL_AUTHENTICATION = object()


def _make_client_fixture(name: str, authenticated_as):
    @pytest.fixture(name=name)
    async def _client(test_session_factory):
        async def override_get_db():
            async with test_session_factory() as session:
                yield session

        async def override_get_authentication():
            return Authentication(user=authenticated_as)

        app.dependency_overrides[get_db] = override_get_db
        if authenticated_as is not _REAL_AUTHENTICATION:
            app.dependency_overrides[get_authentication] = override_get_authentication
        app.dependency_overrides[get_keycloak_client] = FakeKeycloak

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c

        app.dependency_overrides.clear()

    return _client


admin_client_fixture = _make_client_fixture("client", ADMIN)
user_client_fixture = _make_client_fixture("user_client", USER)
anonymous_client_fixture = _make_client_fixture("anonymous_client", None)
# Authorization header verified by FakeKeycloak through the real dependencies
bearer_client_fixture = _make_client_fixture("bearer_client", _REAL_AUTHENTICATION)


@pytest.fixture
async def seed_packstation(test_db):
    """Insert one Packstation (version 0) with Adresse and two Pakete."""
    packstation = Packstation(
        nummer="PS-100",
        baudatum=date(2020, 5, 1),
        ausstattung=["Kartenzahlung", "Beleuchtung"],
    )
    packstation.adresse = Adresse(
        strasse="Moltkestrasse", hausnummer="30",
        postleitzahl="76133", stadt="Karlsruhe",
    )
    packstation.pakete = [
        Paket(nummer="P-1", max_gewicht_in_kg=10.0),
        Paket(nummer="P-2", max_gewicht_in_kg=31.5),
    ]
    test_db.add(packstation)
    await test_db.commit()
    await test_db.refresh(packstation)
    return packstation


@pytest.fixture
def new_packstation():
    """Factory for a valid create body; keyword arguments replace top-level fields."""

    def _body(nummer: str = "PS-200", **overrides) -> dict:
        body = {
            "nummer": nummer,
            "baudatum": "2022-02-01",
            "ausstattung": ["Touchscreen"],
            "adresse": {
                "strasse": "Kaiserstrasse",
                "hausnummer": "12a",
                "postleitzahl": "76131",
                "stadt": "Karlsruhe",
            },
            "pakete": [{"nummer": "F-1", "maxGewichtInKg": 20}],
        }
        body.update(overrides)
        return body

    return _body
