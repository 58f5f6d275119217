# backend/pokemon_manager/pokeapi_client.py

import httpx
import logging
from typing import Any, Dict, List, Union

from .exceptions import UpstreamFetchError
from .models import (
    AbilityDetails, MoveDetails, NamedResource, PokemonDetails, PokemonStat, PokemonSummary,
)

logger = logging.getLogger(__name__)


def parse_resource_id(url: str) -> int:
    """Returns the trailing numeric segment of a PokeAPI resource URL."""
    segments = [segment for segment in url.split("/") if segment]
    return int(segments[-1])


class PokeAPIClient:
    """
    Read-only access to PokeAPI.

    Each fetch issues exactly one GET on the shared httpx client. Any transport
    failure, non-2xx status or undecodable body raises `UpstreamFetchError`;
    nothing partial is ever returned.
    """

    def __init__(self, http_client: httpx.AsyncClient, sprite_base_url: str, catalog_limit: int = 10000):
        self._http = http_client
        self.sprite_base_url = sprite_base_url.rstrip("/")
        self.catalog_limit = catalog_limit

    def _url(self, endpoint: str, params: Dict[str, Any] = None) -> str:
        return str(self._http.build_request("GET", endpoint, params=params).url)

    async def _get_json(self, endpoint: str, params: Dict[str, Any] = None) -> Any:
        url = self._url(endpoint, params)
        logger.debug(f"Fetching data from PokeAPI: {url}")
        try:
            response = await self._http.get(endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out for PokeAPI endpoint: {url}")
            raise UpstreamFetchError(url) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error occurred: {e.response.status_code} {e.response.reason_phrase} for url {url!r}")
            raise UpstreamFetchError(url, status=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"An error occurred while requesting {url!r}: {e}")
            raise UpstreamFetchError(url) from e
        except ValueError as e:
            logger.error(f"Invalid JSON received from {url!r}: {e}")
            raise UpstreamFetchError(url) from e

    def _to_summary(self, item: Dict[str, Any]) -> PokemonSummary:
        pokemon_id = parse_resource_id(item["url"])
        return PokemonSummary(
            name=item["name"],
            url=item["url"],
            id=pokemon_id,
            thumbnail=f"{self.sprite_base_url}/{pokemon_id}.png",
        )

    async def _fetch_list(self, offset: int, limit: int) -> List[PokemonSummary]:
        params = {"offset": offset, "limit": limit}
        data = await self._get_json("/pokemon", params=params)
        try:
            return [self._to_summary(item) for item in data.get("results", [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unexpected Pokémon list payload for offset={offset} limit={limit}: {e}")
            raise UpstreamFetchError(self._url("/pokemon", params)) from e

    async def fetch_summary_page(self, offset: int, limit: int) -> List[PokemonSummary]:
        return await self._fetch_list(offset, limit)

    async def fetch_catalog(self) -> List[PokemonSummary]:
        """Fetches every Pokémon in one request (thousands of entries)."""
        return await self._fetch_list(0, self.catalog_limit)

    async def fetch_details(self, name_or_id: Union[int, str]) -> PokemonDetails:
        endpoint = f"/pokemon/{name_or_id}"
        data = await self._get_json(endpoint)
        try:
            return PokemonDetails(
                id=data["id"],
                name=data["name"],
                abilities=[NamedResource(name=a["ability"]["name"]) for a in data.get("abilities", [])],
                types=[NamedResource(name=t["type"]["name"]) for t in data.get("types", [])],
                height=data.get("height"),
                weight=data.get("weight"),
                base_experience=data.get("base_experience"),
                stats=[
                    PokemonStat(stat_name=s["stat"]["name"], base_value=s["base_stat"])
                    for s in data.get("stats", [])
                ],
                moves=[NamedResource(name=m["move"]["name"]) for m in data.get("moves", [])],
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Pokémon details payload for {name_or_id!r}: {e}")
            raise UpstreamFetchError(self._url(endpoint)) from e

    async def fetch_move(self, name: str) -> MoveDetails:
        return await self._get_json(f"/move/{name}")

    async def fetch_ability(self, name: str) -> AbilityDetails:
        return await self._get_json(f"/ability/{name}")
