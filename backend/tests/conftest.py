# backend/tests/conftest.py

import httpx
import pytest
import pytest_asyncio
import respx
from httpx import ASGITransport, AsyncClient

from pokemon_manager.config import Settings
from pokemon_manager.main import create_app
from pokemon_manager.models import PokemonSummary

POKEAPI_URL = "https://pokeapi.co/api/v2"
SPRITE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"

CATALOG = [
    ("bulbasaur", 1), ("ivysaur", 2), ("venusaur", 3),
    ("charmander", 4), ("charmeleon", 5), ("charizard", 6),
    ("squirtle", 7),
]

PIKACHU = {
    "id": 25, "name": "pikachu", "height": 4, "weight": 60,
    "base_experience": 112, "order": 35, "is_default": True,
    "types": [{"slot": 1, "type": {"name": "electric", "url": "..."}}],
    "abilities": [
        {"slot": 1, "is_hidden": False, "ability": {"name": "static", "url": "..."}},
        {"slot": 3, "is_hidden": True, "ability": {"name": "lightning-rod", "url": "..."}},
    ],
    "stats": [
        {"stat": {"name": "hp", "url": "..."}, "base_stat": 35, "effort": 0},
        {"stat": {"name": "speed", "url": "..."}, "base_stat": 90, "effort": 2},
    ],
    "moves": [{"move": {"name": "thunder-shock", "url": "..."}}, {"move": {"name": "quick-attack", "url": "..."}}],
    "sprites": {"front_default": "ignored"},
}

THUNDERBOLT = {"id": 85, "name": "thunderbolt", "power": 90, "type": {"name": "electric"}}
STATIC = {"id": 9, "name": "static", "is_main_series": True}


def summary(name: str, pokemon_id: int) -> PokemonSummary:
    return PokemonSummary(
        name=name,
        url=f"{POKEAPI_URL}/pokemon/{pokemon_id}/",
        id=pokemon_id,
        thumbnail=f"{SPRITE_URL}/{pokemon_id}.png",
    )


CATALOG_SUMMARIES = [summary(name, pokemon_id) for name, pokemon_id in CATALOG]


def pokemon_list_response(request: httpx.Request) -> httpx.Response:
    """Serves /pokemon?offset=&limit= the way PokeAPI paginates it."""
    offset = int(request.url.params.get("offset", 0))
    limit = int(request.url.params.get("limit", 20))
    page = CATALOG[offset:offset + limit]
    return httpx.Response(200, json={
        "count": len(CATALOG),
        "next": None,
        "previous": None,
        "results": [{"name": name, "url": f"{POKEAPI_URL}/pokemon/{pokemon_id}/"} for name, pokemon_id in page],
    })


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        cache_backend="memory",
        password_hash_iterations=1000,
    )


@pytest.fixture
def pokeapi_mock():
    with respx.mock(base_url=POKEAPI_URL, assert_all_called=False) as mock:
        mock.get("/pokemon", name="list").mock(side_effect=pokemon_list_response)
        mock.get("/pokemon/pikachu", name="pikachu").mock(return_value=httpx.Response(200, json=PIKACHU))
        mock.get("/pokemon/25", name="pikachu-by-id").mock(return_value=httpx.Response(200, json=PIKACHU))
        mock.get("/move/thunderbolt", name="move").mock(return_value=httpx.Response(200, json=THUNDERBOLT))
        mock.get("/ability/static", name="ability").mock(return_value=httpx.Response(200, json=STATIC))
        yield mock


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    # Run startup/shutdown around each test
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
