# backend/pokemon_manager/clients.py
import httpx
import logging

from .config import Settings

logger = logging.getLogger(__name__)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Creates the shared httpx client used for every PokeAPI request."""
    logger.info("Creating httpx client for PokeAPI.")
    return httpx.AsyncClient(
        base_url=settings.pokeapi_base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds, connect=5.0),
        follow_redirects=True,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    """Closes the shared httpx client."""
    if client.is_closed:
        logger.warning("PokeAPI httpx client was already closed.")
        return
    await client.aclose()
    logger.info("PokeAPI httpx client closed.")
