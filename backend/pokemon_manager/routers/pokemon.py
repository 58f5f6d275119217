# backend/pokemon_manager/routers/pokemon.py

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query

from ..config import Settings
from ..dependencies import (
    deserialize_user, get_favorites_service, get_pokedex, get_settings, require_user,
)
from ..favorites import FavoritesService
from ..models import (
    AddFavoritesRequest, FavoritesResponse, PokemonDetails, PokemonSummary, UserPublic,
)
from ..pokedex_data import PokedexService

logger = logging.getLogger(__name__)

# A bad token is rejected on every route; a missing one only on favorites
router = APIRouter(prefix="/pokemon", tags=["Pokemon"], dependencies=[Depends(deserialize_user)])


@router.get(
    "",
    response_model=List[PokemonSummary],
    summary="Get a Page of Pokémon",
    description="Returns Pokémon summaries in PokeAPI order. Data is cached.",
)
async def get_pokemon_list(
    offset: int = Query(0, description="Number of Pokémon to skip."),
    limit: Optional[int] = Query(None, description="Number of Pokémon to return (defaults to 150)."),
    pokedex: PokedexService = Depends(get_pokedex),
    settings: Settings = Depends(get_settings),
):
    limit = limit or settings.default_page_limit
    logger.info(f"Received request for Pokémon list. offset={offset} limit={limit}")
    return await pokedex.get_pokemon_page(offset, limit)


# --- Favorites (registered before /{name_or_id} so the literal path wins) ---

@router.get(
    "/favorites",
    response_model=FavoritesResponse,
    summary="List Favorite Pokémon",
)
async def list_favorite_pokemon(
    user: UserPublic = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    return await favorites.list_favorites(user.id)


@router.post(
    "/favorites",
    response_model=FavoritesResponse,
    summary="Add Favorite Pokémon",
    description="Adds the given Pokémon ids to the user's favorites. Ids already favorited are ignored.",
)
async def add_favorite_pokemon(
    payload: AddFavoritesRequest,
    user: UserPublic = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    return await favorites.add_favorites(user.id, payload.pokemon_ids)


@router.delete(
    "/favorites/{pokemon_id}",
    response_model=FavoritesResponse,
    summary="Remove a Favorite Pokémon",
)
async def remove_favorite_pokemon(
    pokemon_id: int = Path(..., description="ID of the Pokémon to remove."),
    user: UserPublic = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    return await favorites.remove_favorite(user.id, pokemon_id)


@router.get(
    "/move/{move_name}",
    response_model=Dict[str, Any],
    summary="Get Move Details",
)
async def get_move(
    move_name: str = Path(..., description="Move name, e.g. 'thunderbolt'."),
    pokedex: PokedexService = Depends(get_pokedex),
):
    return await pokedex.get_move_details(move_name.lower())


@router.get(
    "/ability/{ability_name}",
    response_model=Dict[str, Any],
    summary="Get Ability Details",
)
async def get_ability(
    ability_name: str = Path(..., description="Ability name, e.g. 'static'."),
    pokedex: PokedexService = Depends(get_pokedex),
):
    return await pokedex.get_ability_details(ability_name.lower())


@router.get(
    "/{name_or_id}",
    response_model=PokemonDetails,
    summary="Get Detailed Data for a Specific Pokémon",
    description="Looks up by National Pokédex ID when the path is numeric, otherwise by name. Data is cached.",
)
async def get_pokemon_details(
    name_or_id: str = Path(..., description="Pokédex ID or name.", examples=["pikachu", "25"]),
    pokedex: PokedexService = Depends(get_pokedex),
):
    if name_or_id.isdigit():
        logger.info(f"Received request for Pokémon details by id: {name_or_id}")
        return await pokedex.get_details_by_id(int(name_or_id))
    identifier = name_or_id.lower()
    logger.info(f"Received request for Pokémon details by name: '{identifier}'")
    return await pokedex.get_details_by_name(identifier)
