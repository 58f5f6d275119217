from fastapi import APIRouter

from .auth import router as auth_router
from .pokemon import router as pokemon_router

api_router = APIRouter(prefix="/v1")
api_router.include_router(auth_router)
api_router.include_router(pokemon_router)

__all__ = ["api_router"]
