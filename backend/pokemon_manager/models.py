# backend/pokemon_manager/models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


# --- Pokemon data ---

class PokemonSummary(BaseModel):
    """Entry of the Pokémon list, as used by list views and favorites."""
    name: str = Field(..., description="Pokémon name")
    url: str = Field(..., description="PokeAPI resource URL")
    id: int = Field(..., description="Pokémon ID, parsed from the URL")
    thumbnail: str = Field(..., description="Default front sprite URL")

class NamedResource(BaseModel):
    name: str

class PokemonStat(BaseModel):
    """Represents a base stat for a Pokémon."""
    model_config = ConfigDict(populate_by_name=True)

    stat_name: str = Field(..., alias="statName", description="Name of the stat (e.g., 'hp', 'attack')")
    base_value: int = Field(..., alias="baseValue", description="Base stat value")

class PokemonDetails(BaseModel):
    id: int
    name: str
    abilities: List[NamedResource]
    types: List[NamedResource]
    height: Optional[int] = None
    weight: Optional[int] = None
    base_experience: Optional[int] = None
    stats: List[PokemonStat]
    moves: List[NamedResource]

# Moves and abilities are passed through from PokeAPI untouched
MoveDetails = Dict[str, Any]
AbilityDetails = Dict[str, Any]


# --- Favorites ---

class AddFavoritesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pokemon_ids: List[int] = Field(..., alias="pokemonIds", description="IDs of the Pokémon to add")

class FavoritesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    favorite_pokemon: List[PokemonSummary] = Field(..., alias="favoritePokemon")


# --- Auth ---

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

class UserPublic(BaseModel):
    """User profile fields safe to return to clients and embed in tokens."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    status: int
    role: int

class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: UserPublic
    error: bool = False
    access_token: str = Field(..., alias="accessToken")
    msg: str = "User registered successfully"

class LoginResponse(BaseModel):
    data: UserPublic
    error: bool = False
    access_token: str
