# backend/pokemon_manager/config.py

import os
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
# Useful for local development
env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file_encoding='utf-8')

    # PokeAPI base URL
    pokeapi_base_url: str = "https://pokeapi.co/api/v2"
    # Thumbnails are built as {sprite_base_url}/{id}.png
    sprite_base_url: str = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"
    # Timeout applied to every outbound PokeAPI request
    http_timeout_seconds: float = 10.0

    # Cache configuration
    # "memory" keeps entries in-process, "redis" uses REDIS_URL
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # Default cache TTL (Time To Live) in seconds (100 minutes)
    cache_ttl_seconds: int = 6000
    # How often the in-memory sweeper drops expired entries
    cache_check_period_seconds: int = 600
    # None disables the bound
    cache_max_entries: Optional[int] = 10000

    # The full catalog backs favorites hydration and is kept for a day
    catalog_cache_ttl_seconds: int = 60 * 60 * 24
    catalog_limit: int = 10000
    default_page_limit: int = 150

    # Database
    database_url: str = "sqlite+aiosqlite:///./pokemon_manager.db"

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_expiry_hours: int = 24
    password_hash_iterations: int = 120_000

    log_level: str = "INFO"


# Create a single instance of the settings to be imported in other modules
settings = Settings()
