# backend/pokemon_manager/pokedex_data.py

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from pydantic import ValidationError

from .models import AbilityDetails, MoveDetails, PokemonDetails, PokemonSummary
from .pokeapi_client import PokeAPIClient

logger = logging.getLogger(__name__)

POKEMON_LIST_CACHE_PREFIX = "pokemon-list:"
POKEMON_CATALOG_CACHE_KEY = "pokemon-list:all"
POKEMON_DETAIL_BY_ID_PREFIX = "pokemon:id:"
POKEMON_DETAIL_BY_NAME_PREFIX = "pokemon:name:"
MOVE_CACHE_PREFIX = "move:"
ABILITY_CACHE_PREFIX = "ability:"


def page_cache_key(offset: int, limit: int) -> str:
    return f"{POKEMON_LIST_CACHE_PREFIX}{offset}-{limit}"


class PokedexService:
    """
    Cache-or-fetch access to Pokémon data.

    Every lookup first consults the injected cache; on a miss it calls PokeAPI,
    stores the normalized result and returns it. Cached values are plain JSON
    structures (model dumps) so the same code works with the in-memory and the
    Redis backend. Keys carry their data kind as a prefix, so a move and a
    Pokémon sharing a name never collide.
    """

    def __init__(self, client: PokeAPIClient, cache, catalog_ttl: Optional[float] = None):
        self.client = client
        self.cache = cache
        self.catalog_ttl = catalog_ttl
        self._catalog_lock = asyncio.Lock()

    async def _cached(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        load: Callable[[Any], Any],
        dump: Callable[[Any], Any],
        ttl: Optional[float] = None,
    ) -> Any:
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                value = load(cached)
                logger.info(f"Serving {key} from cache.")
                return value
            except (ValidationError, TypeError) as e:
                logger.error(f"Invalid cache entry for {key}: {e}", exc_info=True)
                await self.cache.delete(key)
                # Fall through

        logger.info(f"Fetching fresh data for {key} from PokeAPI...")
        value = await fetch()
        await self.cache.set(key, dump(value), ttl=ttl)
        return value

    async def _cached_summaries(self, key: str, fetch, ttl: Optional[float] = None) -> List[PokemonSummary]:
        return await self._cached(
            key,
            fetch,
            load=lambda items: [PokemonSummary.model_validate(item) for item in items],
            dump=lambda summaries: [s.model_dump() for s in summaries],
            ttl=ttl,
        )

    async def _cached_details(self, key: str, name_or_id) -> PokemonDetails:
        return await self._cached(
            key,
            lambda: self.client.fetch_details(name_or_id),
            load=PokemonDetails.model_validate,
            dump=lambda details: details.model_dump(),
        )

    async def get_pokemon_page(self, offset: int, limit: int) -> List[PokemonSummary]:
        """Returns one page of Pokémon summaries, exactly as PokeAPI paginates them."""
        return await self._cached_summaries(
            page_cache_key(offset, limit),
            lambda: self.client.fetch_summary_page(offset, limit),
        )

    async def get_details_by_id(self, pokemon_id: int) -> PokemonDetails:
        return await self._cached_details(f"{POKEMON_DETAIL_BY_ID_PREFIX}{pokemon_id}", pokemon_id)

    async def get_details_by_name(self, name: str) -> PokemonDetails:
        return await self._cached_details(f"{POKEMON_DETAIL_BY_NAME_PREFIX}{name}", name)

    async def get_move_details(self, name: str) -> MoveDetails:
        return await self._cached(
            f"{MOVE_CACHE_PREFIX}{name}",
            lambda: self.client.fetch_move(name),
            load=dict,
            dump=lambda payload: payload,
        )

    async def get_ability_details(self, name: str) -> AbilityDetails:
        return await self._cached(
            f"{ABILITY_CACHE_PREFIX}{name}",
            lambda: self.client.fetch_ability(name),
            load=dict,
            dump=lambda payload: payload,
        )

    async def get_full_catalog(self) -> List[PokemonSummary]:
        """
        Returns every Pokémon summary, in PokeAPI order.

        Used to hydrate favorites. Concurrent misses wait on a lock and re-check
        the cache, so the catalog is fetched at most once per TTL window.
        """
        async with self._catalog_lock:
            return await self._cached_summaries(
                POKEMON_CATALOG_CACHE_KEY,
                self.client.fetch_catalog,
                ttl=self.catalog_ttl,
            )

    async def hydrate(self, pokemon_ids) -> List[PokemonSummary]:
        """Resolves stored ids to catalog entries; unknown ids are dropped."""
        wanted = set(pokemon_ids)
        if not wanted:
            return []
        catalog = await self.get_full_catalog()
        return [pokemon for pokemon in catalog if pokemon.id in wanted]
