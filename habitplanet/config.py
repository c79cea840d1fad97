"""Configuration management"""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv

from habitplanet.exceptions import ConfigurationError

load_dotenv()

# Storage
# - 'file' (default): one JSON document per record set under DATA_PATH
# - 'memory': nothing survives a restart (tests, demos)
STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "file")
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar days are derived in this timezone
APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

# Gacha
DRAW_COST: int = int(os.getenv("DRAW_COST", "100"))

# Content generation (advice text and card art)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
ADVICE_MODEL: str = os.getenv("ADVICE_MODEL", "gpt-4o-mini")
CARD_ART_MODEL: str = os.getenv("CARD_ART_MODEL", "gpt-image-1")
CONTENT_GENERATION_TIMEOUT: float = float(os.getenv("CONTENT_GENERATION_TIMEOUT", "30"))

# API
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8080"))


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if STORAGE_BACKEND not in ("file", "memory"):
        raise ConfigurationError(
            f"Unknown storage backend: {STORAGE_BACKEND}",
            config_key="STORAGE_BACKEND"
        )
    if DRAW_COST <= 0:
        raise ConfigurationError("DRAW_COST must be positive", config_key="DRAW_COST")
    if CONTENT_GENERATION_TIMEOUT <= 0:
        raise ConfigurationError(
            "CONTENT_GENERATION_TIMEOUT must be positive",
            config_key="CONTENT_GENERATION_TIMEOUT"
        )
    try:
        ZoneInfo(APP_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(
            f"Invalid timezone: {APP_TIMEZONE}",
            config_key="APP_TIMEZONE"
        )
    # OPENAI_API_KEY is optional: without it advice and card art use fallbacks
