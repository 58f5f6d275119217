# backend/pokemon_manager/favorites.py

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from .exceptions import FavoriteWriteError
from .models import FavoritesResponse
from .pokedex_data import PokedexService
from .repositories import FavoritesRepository

logger = logging.getLogger(__name__)


class FavoritesService:
    """Keeps a user's favorite Pokémon and hydrates them from the cached catalog."""

    def __init__(self, repository: FavoritesRepository, pokedex: PokedexService):
        self.repository = repository
        self.pokedex = pokedex

    async def _favorites_for(self, user_id: int) -> FavoritesResponse:
        pokemon_ids = await self.repository.find_by_user(user_id)
        favorite_pokemon = await self.pokedex.hydrate(pokemon_ids)
        return FavoritesResponse(favorite_pokemon=favorite_pokemon)

    async def add_favorites(self, user_id: int, pokemon_ids: Iterable[int]) -> FavoritesResponse:
        """
        Adds the given Pokémon to the user's favorites.

        Ids that are already favorited, or repeated within the request, are
        inserted only once. All new rows are written in one transaction.
        """
        existing = set(await self.repository.find_by_user(user_id))
        new_ids = [pokemon_id for pokemon_id in dict.fromkeys(pokemon_ids) if pokemon_id not in existing]

        if new_ids:
            try:
                await self.repository.bulk_create(user_id, new_ids)
            except SQLAlchemyError as e:
                logger.error(f"Failed to add favorites {new_ids} for user {user_id}: {e}", exc_info=True)
                raise FavoriteWriteError("Failed to add favorite Pokémon") from e
            logger.info(f"User {user_id} added {len(new_ids)} favorite(s).")

        return await self._favorites_for(user_id)

    async def remove_favorite(self, user_id: int, pokemon_id: int) -> FavoritesResponse:
        """Removes one favorite; removing something not favorited is a no-op."""
        try:
            removed = await self.repository.destroy(user_id, pokemon_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove favorite {pokemon_id} for user {user_id}: {e}", exc_info=True)
            raise FavoriteWriteError("Failed to remove favorite Pokémon") from e
        if removed:
            logger.info(f"User {user_id} removed favorite {pokemon_id}.")

        return await self._favorites_for(user_id)

    async def list_favorites(self, user_id: int) -> FavoritesResponse:
        return await self._favorites_for(user_id)
