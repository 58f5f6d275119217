# backend/tests/test_main_endpoints.py

import logging

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from conftest import POKEAPI_URL, STATIC, THUNDERBOLT
from pokemon_manager.config import Settings
from pokemon_manager.main import create_app
from pokemon_manager.repositories import FavoritesRepository
from pokemon_manager.security import sign_token

REGISTER_PAYLOAD = {"name": "A", "email": "a@x.com", "password": "pw123456"}


async def register(client, payload=REGISTER_PAYLOAD):
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_read_root(client):
    """Test the root endpoint '/'."""
    response = await client.get("/")

    assert response.status_code == 200
    json_response = response.json()
    assert json_response["message"] == "Welcome to the Pokemon Manager API!"
    assert json_response["documentation"] == "/v1/docs"
    assert json_response["cache_backend"] == "memory"


@pytest.mark.asyncio
async def test_get_pokemon_list(client, pokeapi_mock):
    response = await client.get("/v1/pokemon", params={"offset": 0, "limit": 2})

    assert response.status_code == 200
    pokemon = response.json()
    assert len(pokemon) == 2
    for entry in pokemon:
        assert entry["id"] == int(entry["url"].rstrip("/").split("/")[-1])
        assert entry["thumbnail"].endswith(f"/{entry['id']}.png")

    # Second call within the TTL is served from the cache
    await client.get("/v1/pokemon", params={"offset": 0, "limit": 2})
    assert pokeapi_mock["list"].call_count == 1


@pytest.mark.asyncio
async def test_get_pokemon_list_defaults(client, pokeapi_mock):
    response = await client.get("/v1/pokemon")

    assert response.status_code == 200
    request = pokeapi_mock["list"].calls.last.request
    assert request.url.params["offset"] == "0"
    assert request.url.params["limit"] == "150"


@pytest.mark.asyncio
async def test_get_pokemon_list_rejects_non_integer_query(client, pokeapi_mock):
    response = await client.get("/v1/pokemon", params={"offset": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] is True
    assert not pokeapi_mock["list"].called


@pytest.mark.asyncio
async def test_get_pokemon_detail_by_name(client, pokeapi_mock):
    response = await client.get("/v1/pokemon/Pikachu")

    assert response.status_code == 200
    json_response = response.json()
    assert json_response["name"] == "pikachu"
    assert json_response["id"] == 25
    assert json_response["abilities"] == [{"name": "static"}, {"name": "lightning-rod"}]
    assert json_response["stats"][0] == {"statName": "hp", "baseValue": 35}
    assert pokeapi_mock["pikachu"].called


@pytest.mark.asyncio
async def test_get_pokemon_detail_by_id(client, pokeapi_mock):
    response = await client.get("/v1/pokemon/25")

    assert response.status_code == 200
    assert response.json()["name"] == "pikachu"
    assert pokeapi_mock["pikachu-by-id"].called
    assert not pokeapi_mock["pikachu"].called


@pytest.mark.asyncio
async def test_get_pokemon_detail_upstream_failure(client, pokeapi_mock):
    """Test GET /v1/pokemon/{name} when PokeAPI answers 404."""
    pokeapi_mock.get("/pokemon/notapokemon").mock(return_value=httpx.Response(404))

    response = await client.get("/v1/pokemon/notapokemon")

    assert response.status_code == 500
    assert response.json() == {"error": True, "msg": "Failed to fetch Pokémon data"}


@pytest.mark.asyncio
async def test_get_move_and_ability(client, pokeapi_mock):
    move = await client.get("/v1/pokemon/move/thunderbolt")
    ability = await client.get("/v1/pokemon/ability/static")

    assert move.status_code == 200
    assert move.json() == THUNDERBOLT
    assert ability.status_code == 200
    assert ability.json() == STATIC


@pytest.mark.asyncio
async def test_register_then_add_favorites(client, pokeapi_mock):
    body = await register(client)

    assert body["error"] is False
    assert body["data"]["email"] == "a@x.com"
    assert "password" not in body["data"]
    token = body["accessToken"]

    response = await client.post("/v1/pokemon/favorites", json={"pokemonIds": [1, 4]}, headers=bearer(token))

    assert response.status_code == 200
    favorites = response.json()["favoritePokemon"]
    assert [p["name"] for p in favorites] == ["bulbasaur", "charmander"]
    assert [p["id"] for p in favorites] == [1, 4]


@pytest.mark.asyncio
async def test_favorites_lifecycle(client, pokeapi_mock):
    token = (await register(client))["accessToken"]
    headers = bearer(token)

    empty = await client.get("/v1/pokemon/favorites", headers=headers)
    assert empty.status_code == 200
    assert empty.json() == {"favoritePokemon": []}

    await client.post("/v1/pokemon/favorites", json={"pokemonIds": [5]}, headers=headers)
    added = await client.post("/v1/pokemon/favorites", json={"pokemonIds": [5, 6]}, headers=headers)
    assert [p["id"] for p in added.json()["favoritePokemon"]] == [5, 6]

    removed = await client.delete("/v1/pokemon/favorites/5", headers=headers)
    assert removed.status_code == 200
    assert [p["id"] for p in removed.json()["favoritePokemon"]] == [6]

    missing = await client.delete("/v1/pokemon/favorites/5", headers=headers)
    assert missing.status_code == 200
    assert [p["id"] for p in missing.json()["favoritePokemon"]] == [6]

    listed = await client.get("/v1/pokemon/favorites", headers=headers)
    assert [p["name"] for p in listed.json()["favoritePokemon"]] == ["charizard"]

    # The full catalog was fetched once for all of the above
    catalog_calls = [
        call for call in pokeapi_mock["list"].calls
        if call.request.url.params.get("limit") == "10000"
    ]
    assert len(catalog_calls) == 1


@pytest.mark.asyncio
async def test_add_favorites_validates_body(client):
    token = (await register(client))["accessToken"]

    response = await client.post("/v1/pokemon/favorites", json={"pokemonIds": ["pikachu"]}, headers=bearer(token))

    assert response.status_code == 400
    assert response.json()["error"] is True


@pytest.mark.asyncio
async def test_favorites_require_token(client):
    response = await client.get("/v1/pokemon/favorites")

    assert response.status_code == 403
    assert response.json() == {"error": True, "errorMsg": "Auth token user not found"}


@pytest.mark.asyncio
async def test_invalid_token_is_rejected_everywhere(client, pokeapi_mock):
    for path in ("/v1/pokemon/favorites", "/v1/pokemon"):
        response = await client.get(path, headers=bearer("not-a-jwt"))
        assert response.status_code == 403
        assert response.json()["error"] is True
        assert response.json()["errorMsg"]


@pytest.mark.asyncio
async def test_expired_token_is_rejected(client, settings):
    expired_settings = Settings(jwt_secret=settings.jwt_secret, token_expiry_hours=-1)
    token = sign_token({"id": 1}, expired_settings)

    response = await client.get("/v1/pokemon/favorites", headers=bearer(token))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_token_for_missing_user(client, settings):
    token = sign_token({"id": 999, "email": "ghost@x.com"}, settings)

    response = await client.get("/v1/pokemon/favorites", headers=bearer(token))

    assert response.status_code == 400
    assert response.json() == {"error": True, "msg": "User not found"}


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await register(client)

    response = await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 400
    assert response.json() == {"error": True, "msg": "Email is already used"}


@pytest.mark.asyncio
async def test_register_validates_fields(client):
    response = await client.post("/v1/auth/register", json={"name": "A", "email": "not-an-email", "password": "pw"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] is True
    assert len(body["errors"]) == 2


@pytest.mark.asyncio
async def test_login(client):
    await register(client)

    response = await client.post("/v1/auth/login", json={"email": "a@x.com", "password": "pw123456"})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is False
    assert body["data"]["name"] == "A"
    assert body["access_token"]


@pytest.mark.asyncio
async def test_login_failures(client):
    await register(client)

    wrong_password = await client.post("/v1/auth/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = await client.post("/v1/auth/login", json={"email": "b@x.com", "password": "pw123456"})

    assert wrong_password.status_code == 400
    assert wrong_password.json()["msg"] == "Password is incorrect"
    assert unknown_email.status_code == 400
    assert unknown_email.json()["msg"] == "Email ID is incorrect"


@pytest.mark.asyncio
async def test_openapi_served_under_v1(client):
    response = await client.get("/v1/openapi.json")

    assert response.status_code == 200
    assert "/v1/pokemon/favorites" in response.json()["paths"]
    assert (await client.get("/v1/docs")).status_code == 200
    assert (await client.get("/docs")).status_code == 404


@pytest.mark.asyncio
async def test_database_failure_returns_json_500(client, monkeypatch, caplog):
    token = (await register(client))["accessToken"]

    async def broken_find_by_user(self, user_id):
        raise OperationalError("SELECT pokemon_id FROM favorites", {}, Exception("database is locked"))

    monkeypatch.setattr(FavoritesRepository, "find_by_user", broken_find_by_user)

    with caplog.at_level(logging.ERROR, logger="pokemon_manager.main"):
        response = await client.get("/v1/pokemon/favorites", headers=bearer(token))

    assert response.status_code == 500
    assert response.json() == {"error": True, "msg": "Internal server error"}
    assert any(record.exc_info for record in caplog.records)


def test_create_app_applies_log_level(settings):
    root = logging.getLogger()
    previous = root.level
    try:
        create_app(settings.model_copy(update={"log_level": "WARNING"}))
        assert root.level == logging.WARNING

        create_app(settings.model_copy(update={"log_level": "debug"}))
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
