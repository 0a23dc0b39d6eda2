"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CITY_NAME = "Denver, CO"
DEFAULT_CITY_LAT = 39.7392
DEFAULT_CITY_LNG = -104.9903


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    listing_api_url: str
    database_url: str = ""
    server_port: int = 9000
    default_radius: float = 25.0
    fallback_state: str = "CO"
    location_store_path: str = "data/location.json"
    geolocation_timeout: float = 10.0
    default_city_name: str = DEFAULT_CITY_NAME
    default_city_lat: float = DEFAULT_CITY_LAT
    default_city_lng: float = DEFAULT_CITY_LNG


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    listing_api_url = os.getenv("LISTING_API_URL", "").rstrip("/")
    database_url = os.getenv("DATABASE_URL", "")
    server_port = int(os.getenv("SERVER_PORT", "9000"))
    default_radius = float(os.getenv("DEFAULT_RADIUS_MILES", "25"))
    fallback_state = os.getenv("FALLBACK_STATE", "CO").strip().upper() or "CO"
    location_store_path = os.getenv("LOCATION_STORE_PATH", "data/location.json")
    geolocation_timeout = float(os.getenv("GEOLOCATION_TIMEOUT", "10"))

    if not listing_api_url:
        logger.warning("LISTING_API_URL is not set; listing requests will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; geolocation and geocoding will fall back to defaults.")
    if not database_url:
        logger.warning("DATABASE_URL is not set; session locations will not be persisted by the server.")

    return Settings(
        google_api_key=google_api_key,
        listing_api_url=listing_api_url,
        database_url=database_url,
        server_port=server_port,
        default_radius=default_radius,
        fallback_state=fallback_state,
        location_store_path=location_store_path,
        geolocation_timeout=geolocation_timeout,
    )
