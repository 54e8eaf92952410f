"""GraphQL Schema — queries and mutations at /graphql.

Invariants:
    - packstation/packstationen are public and return adresse and pakete
    - create/update/delete enforce roles like the REST routes
    - update takes id and version in its input and returns the new version
    - Domain errors carry extensions.code
    - token/refresh are forwarded to the identity provider
    - a rejected bearer token only fails operations that need a role
"""

PACKSTATION_QUERY = """
query ($id: ID!) {
    packstation(id: $id) {
        id version nummer baudatum ausstattung
        adresse { strasse hausnummer postleitzahl stadt }
        pakete { nummer maxGewichtInKg }
    }
}
"""

CREATE_MUTATION = """
mutation ($input: PackstationInput!) {
    create(input: $input) { id }
}
"""

UPDATE_MUTATION = """
mutation ($input: PackstationUpdateInput!) {
    update(input: $input) { version }
}
"""


def _create_input(nummer: str = "PS-500") -> dict:
    return {
        "nummer": nummer,
        "baudatum": "2023-03-03",
        "ausstattung": ["Kartenzahlung"],
        "adresse": {
            "strasse": "Erzbergerstrasse",
            "hausnummer": "121",
            "postleitzahl": "76133",
            "stadt": "Karlsruhe",
        },
        "pakete": [{"nummer": "G-1", "maxGewichtInKg": 15.5}],
    }


async def _graphql(
    client, query: str, variables: dict | None = None, token: str | None = None,
) -> dict:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    res = await client.post(
        "/graphql", json={"query": query, "variables": variables or {}}, headers=headers,
    )
    assert res.status_code == 200
    return res.json()


def _error_code(result: dict) -> str:
    return result["errors"][0]["extensions"]["code"]


# ─── Queries ─────────────────────────────────────────────────────

async def test_query_packstation_by_id(anonymous_client, seed_packstation):
    result = await _graphql(
        anonymous_client, PACKSTATION_QUERY, {"id": str(seed_packstation.id)},
    )
    packstation = result["data"]["packstation"]
    assert packstation["nummer"] == "PS-100"
    assert packstation["version"] == 0
    assert packstation["adresse"]["stadt"] == "Karlsruhe"
    assert packstation["pakete"][1] == {"nummer": "P-2", "maxGewichtInKg": 31.5}


async def test_query_unknown_packstation_reports_not_found(anonymous_client):
    result = await _graphql(anonymous_client, PACKSTATION_QUERY, {"id": "999"})
    assert result["data"] is None
    assert _error_code(result) == "PACKSTATION_NOT_FOUND"


async def test_query_packstation_with_invalid_id(anonymous_client):
    result = await _graphql(anonymous_client, PACKSTATION_QUERY, {"id": "xyz"})
    assert _error_code(result) == "BAD_USER_INPUT"


async def test_query_packstationen_with_suchkriterien(anonymous_client, seed_packstation):
    result = await _graphql(
        anonymous_client,
        """
        query { packstationen(suchkriterien: {stadt: "KARLSRUHE"}) { nummer } }
        """,
    )
    assert result["data"]["packstationen"] == [{"nummer": "PS-100"}]


async def test_query_packstationen_without_match(anonymous_client, seed_packstation):
    result = await _graphql(
        anonymous_client,
        'query { packstationen(suchkriterien: {nummer: "XX"}) { nummer } }',
    )
    assert _error_code(result) == "PACKSTATION_NOT_FOUND"


# ─── create ──────────────────────────────────────────────────────

async def test_create_mutation_returns_id(client):
    result = await _graphql(client, CREATE_MUTATION, {"input": _create_input()})
    assert "errors" not in result
    new_id = result["data"]["create"]["id"]

    result = await _graphql(client, PACKSTATION_QUERY, {"id": str(new_id)})
    assert result["data"]["packstation"]["nummer"] == "PS-500"


async def test_create_mutation_duplicate_nummer(client, seed_packstation):
    result = await _graphql(client, CREATE_MUTATION, {"input": _create_input("PS-100")})
    assert _error_code(result) == "PACKSTATION_NUMMER_EXISTS"


async def test_create_mutation_invalid_input(client):
    data = _create_input()
    data["adresse"]["postleitzahl"] = "ABCDE"
    result = await _graphql(client, CREATE_MUTATION, {"input": data})
    assert _error_code(result) == "BAD_USER_INPUT"
    details = result["errors"][0]["extensions"]["details"]
    assert any("postleitzahl" in d["field"] for d in details)


async def test_create_mutation_requires_token(anonymous_client):
    result = await _graphql(anonymous_client, CREATE_MUTATION, {"input": _create_input()})
    assert _error_code(result) == "UNAUTHORIZED"


# ─── update ──────────────────────────────────────────────────────

async def test_update_mutation_returns_new_version(client, seed_packstation):
    result = await _graphql(client, UPDATE_MUTATION, {"input": {
        "id": str(seed_packstation.id), "version": 0, "nummer": "PS-111",
    }})
    assert result["data"]["update"] == {"version": 1}


async def test_update_mutation_with_stale_version(client, seed_packstation):
    variables = {"input": {
        "id": str(seed_packstation.id), "version": 0, "nummer": "PS-111",
    }}
    await _graphql(client, UPDATE_MUTATION, variables)
    result = await _graphql(client, UPDATE_MUTATION, variables)
    assert _error_code(result) == "VERSION_OUTDATED"


async def test_update_mutation_with_negative_version(client, seed_packstation):
    result = await _graphql(client, UPDATE_MUTATION, {"input": {
        "id": str(seed_packstation.id), "version": -1, "nummer": "PS-111",
    }})
    assert _error_code(result) == "VERSION_INVALID"


# ─── delete ──────────────────────────────────────────────────────

async def test_delete_mutation(client, seed_packstation):
    mutation = "mutation ($id: ID!) { delete(id: $id) }"
    result = await _graphql(client, mutation, {"id": str(seed_packstation.id)})
    assert result["data"]["delete"] is True

    result = await _graphql(client, mutation, {"id": str(seed_packstation.id)})
    assert result["data"]["delete"] is False


async def test_delete_mutation_requires_admin(user_client, seed_packstation):
    result = await _graphql(
        user_client,
        "mutation ($id: ID!) { delete(id: $id) }",
        {"id": str(seed_packstation.id)},
    )
    assert _error_code(result) == "FORBIDDEN"


# ─── token / refresh ─────────────────────────────────────────────

async def test_token_mutation(anonymous_client):
    result = await _graphql(
        anonymous_client,
        'mutation { token(username: "admin", password: "p") '
        "{ accessToken expiresIn refreshToken refreshExpiresIn } }",
    )
    assert result["data"]["token"] == {
        "accessToken": "access-1",
        "expiresIn": 300,
        "refreshToken": "refresh-1",
        "refreshExpiresIn": 1800,
    }


async def test_token_mutation_with_wrong_password(anonymous_client):
    result = await _graphql(
        anonymous_client,
        'mutation { token(username: "admin", password: "x") { accessToken } }',
    )
    assert _error_code(result) == "BAD_USER_INPUT"


async def test_refresh_mutation(anonymous_client):
    result = await _graphql(
        anonymous_client,
        'mutation { refresh(refreshToken: "refresh-1") { accessToken refreshToken } }',
    )
    assert result["data"]["refresh"] == {
        "accessToken": "access-2",
        "refreshToken": "refresh-2",
    }


# ─── bearer token ────────────────────────────────────────────────

async def test_refresh_with_expired_bearer_token(bearer_client):
    result = await _graphql(
        bearer_client,
        'mutation { refresh(refreshToken: "refresh-1") { accessToken } }',
        token="expired.jwt.token",
    )
    assert "errors" not in result
    assert result["data"]["refresh"] == {"accessToken": "access-2"}


async def test_query_with_expired_bearer_token(bearer_client, seed_packstation):
    result = await _graphql(
        bearer_client, PACKSTATION_QUERY, {"id": str(seed_packstation.id)},
        token="expired.jwt.token",
    )
    assert result["data"]["packstation"]["nummer"] == "PS-100"


async def test_create_with_expired_bearer_token_is_unauthorized(bearer_client):
    result = await _graphql(
        bearer_client, CREATE_MUTATION, {"input": _create_input()},
        token="expired.jwt.token",
    )
    assert _error_code(result) == "UNAUTHORIZED"


async def test_create_with_valid_bearer_token(bearer_client):
    result = await _graphql(
        bearer_client, CREATE_MUTATION, {"input": _create_input()},
        token="user-token",
    )
    assert isinstance(result["data"]["create"]["id"], int)


async def test_delete_with_roleless_bearer_token_is_forbidden(bearer_client, seed_packstation):
    result = await _graphql(
        bearer_client,
        "mutation ($id: ID!) { delete(id: $id) }",
        {"id": str(seed_packstation.id)},
        token="guest-token",
    )
    assert _error_code(result) == "FORBIDDEN"
