"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when a setting required by an operation is missing."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    database_url: str
    server_port: int = 8080
    search_limit: int = 50
    search_radius_m: int = 5000
    default_max_distance_km: float = 10.0
    travel_speed_kmh: float = 50.0
    db_pool_min: int = 1
    db_pool_max: int = 5

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ConfigError("DATABASE_URL is required for database connections")
        return self.database_url

    def require_google_api_key(self) -> str:
        if not self.google_api_key:
            raise ConfigError("GOOGLE_API_KEY is required for place search")
        return self.google_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    server_port = int(os.getenv("PORT") or os.getenv("SERVER_PORT") or "8080")
    search_limit = int(os.getenv("SEARCH_LIMIT", "50"))
    search_radius_m = int(os.getenv("SEARCH_RADIUS_M", "5000"))
    default_max_distance_km = float(os.getenv("DEFAULT_MAX_DISTANCE_KM", "10"))
    travel_speed_kmh = float(os.getenv("TRAVEL_SPEED_KMH", "50"))
    db_pool_min = int(os.getenv("DB_POOL_MIN", "1"))
    db_pool_max = int(os.getenv("DB_POOL_MAX", "5"))

    if not database_url:
        logger.warning("DATABASE_URL is not set; rating storage will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; place search requests will fail.")

    return Settings(
        google_api_key=google_api_key,
        database_url=database_url,
        server_port=server_port,
        search_limit=search_limit,
        search_radius_m=search_radius_m,
        default_max_distance_km=default_max_distance_km,
        travel_speed_kmh=travel_speed_kmh,
        db_pool_min=db_pool_min,
        db_pool_max=db_pool_max,
    )
