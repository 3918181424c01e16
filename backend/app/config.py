"""
Configuration settings for the position math API

Loads environment variables and provides application configuration.
"""
import os
from typing import List
from dotenv import load_dotenv

from lp_tracker.constants import DEFAULT_CURVE_BUFFER_PERCENT, DEFAULT_CURVE_DATA_SAMPLES
from lp_tracker.curve.cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings"""

    # API Configuration
    API_VERSION: str = "0.1.0"
    API_TITLE: str = "Uniswap V3 Position Math API"
    API_DESCRIPTION: str = "Value, PnL curve and APR calculations for Uniswap V3 liquidity positions"

    # CORS Configuration
    CORS_ORIGINS: List[str] = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000"
    ).split(",")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Curve Configuration
    CURVE_SAMPLE_COUNT: int = int(os.getenv("CURVE_SAMPLE_COUNT", DEFAULT_CURVE_DATA_SAMPLES))
    CURVE_BUFFER_PERCENT: int = int(os.getenv("CURVE_BUFFER_PERCENT", DEFAULT_CURVE_BUFFER_PERCENT))
    CURVE_CACHE_TTL_SECONDS: float = float(os.getenv("CURVE_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS))
    CURVE_CACHE_MAX_ENTRIES: int = int(os.getenv("CURVE_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES))


# Create global settings instance
settings = Settings()
