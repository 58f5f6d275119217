# backend/pokemon_manager/dependencies.py

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .db import get_db
from .exceptions import AuthError, NotFoundError
from .favorites import FavoritesService
from .models import UserPublic
from .pokedex_data import PokedexService
from .repositories import FavoritesRepository, UserRepository
from .security import verify_token
from .user_service import get_user_by_id

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pokedex(request: Request) -> PokedexService:
    return request.app.state.pokedex


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_favorites_service(
    db: AsyncSession = Depends(get_db),
    pokedex: PokedexService = Depends(get_pokedex),
) -> FavoritesService:
    return FavoritesService(FavoritesRepository(db), pokedex)


def deserialize_user(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> Optional[Dict[str, Any]]:
    """
    Decodes the bearer token, if any.

    No token means an anonymous request; a token that fails verification is
    rejected with 403 even on routes that do not require a user.
    """
    token = authorization
    if token and token.startswith("Bearer "):
        token = token[len("Bearer "):]
    if not token:
        return None

    result = verify_token(token, settings)
    if result.valid and not result.expired:
        return result.decoded
    raise AuthError(result.msg or "Invalid token")


async def require_user(
    token_user: Optional[Dict[str, Any]] = Depends(deserialize_user),
    users: UserRepository = Depends(get_user_repository),
) -> UserPublic:
    """Resolves the token's user against the database."""
    if not token_user or "id" not in token_user:
        raise AuthError("Auth token user not found")
    try:
        return await get_user_by_id(users, token_user["id"])
    except NotFoundError as e:
        logger.warning(f"Token refers to missing user {token_user['id']}.")
        raise NotFoundError(e.message, status_code=400) from e
