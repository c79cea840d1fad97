"""Bearer API-key authentication for the REST API"""
import logging
import os
import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from habitplanet.observability.metrics import record_rejection

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_api_keys() -> list[str]:
    """Accepted keys from API_KEYS (comma-separated), read on every request"""
    return [key.strip() for key in os.getenv("API_KEYS", "").split(",") if key.strip()]


def is_valid_key(candidate: str, valid_keys: list[str]) -> bool:
    # Constant-time per key, no early exit
    matched = False
    for key in valid_keys:
        if secrets.compare_digest(candidate.encode(), key.encode()):
            matched = True
    return matched


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """
    FastAPI dependency guarding every /api/v1 route

    Raises:
        HTTPException: 503 when no keys are configured, 401 for an unknown key
    """
    valid_keys = get_api_keys()
    if not valid_keys:
        logger.error("No API_KEYS configured - rejecting all requests")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API authentication not configured"
        )

    api_key = credentials.credentials
    if not is_valid_key(api_key, valid_keys):
        record_rejection("authenticate", "InvalidApiKey")
        logger.warning(f"Invalid API key attempt: {api_key[:4]}...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )

    return api_key
