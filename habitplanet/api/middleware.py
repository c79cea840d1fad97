"""API middleware for rate limiting and CORS"""
import logging
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from habitplanet.config import CORS_ORIGINS, RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

# Per-IP limits are set on each route
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


def setup_cors(app):
    """Configure CORS middleware"""
    cors_origins = [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"CORS configured for origins: {cors_origins}")


def setup_rate_limiting(app):
    """Configure rate limiting"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    logger.info(f"Rate limiting {'enabled' if limiter.enabled else 'disabled'}")
