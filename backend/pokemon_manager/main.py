# backend/pokemon_manager/main.py

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .cache import create_cache
from .clients import create_http_client, close_http_client
from .config import Settings, settings as default_settings
from .db import create_engine, create_session_factory, run_migrations
from .exceptions import PokemonManagerError, UpstreamFetchError
from .pokeapi_client import PokeAPIClient
from .pokedex_data import PokedexService
from .routers import api_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Startup phase
    logger.info("Application startup...")
    engine = create_engine(settings.database_url)
    await run_migrations(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    cache = create_cache(settings)
    cache.start_sweeper()
    app.state.cache = cache
    logger.info(f"Cache backend configured: {cache.backend_name}")

    http_client = create_http_client(settings)
    app.state.http_client = http_client
    app.state.pokedex = PokedexService(
        PokeAPIClient(http_client, settings.sprite_base_url, catalog_limit=settings.catalog_limit),
        cache,
        catalog_ttl=settings.catalog_cache_ttl_seconds,
    )

    yield # Application runs here

    # Shutdown phase
    logger.info("Application shutdown...")
    await close_http_client(http_client)
    await cache.close()
    await engine.dispose()
    logger.info("Resources cleaned up.")


async def handle_service_error(request: Request, exc: PokemonManagerError):
    if isinstance(exc, UpstreamFetchError):
        logger.error(f"Upstream fetch failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, exc.message_field: exc.message},
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": True, "msg": "Internal server error"},
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": True, "msg": "Internal server error"},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    logger.info(f"Validation error on {request.url.path}: {messages}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": True, "msg": ", ".join(messages), "errors": messages},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title="Pokemon Manager API",
        description="Cached PokeAPI proxy with user accounts and favorite Pokémon",
        version="1.0.0",
        docs_url="/v1/docs",
        redoc_url="/v1/redoc",
        openapi_url="/v1/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(PokemonManagerError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(api_router)

    @app.get("/")
    async def read_root(request: Request):
        """ Basic root endpoint to check if the API is running. """
        cache = getattr(request.app.state, "cache", None)
        return {
            "message": "Welcome to the Pokemon Manager API!",
            "documentation": "/v1/docs",
            "cache_backend": cache.backend_name if cache is not None else "not configured",
        }

    return app


app = create_app()
