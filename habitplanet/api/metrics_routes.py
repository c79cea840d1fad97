"""
Prometheus scrape endpoint for HabitPlanet

The breaker listener only reports transitions, so the content-generation
breaker gauge is set from the live breaker on every scrape. A fresh process
therefore exposes "closed" instead of no sample at all.
"""
import logging
from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from habitplanet.observability.metrics import record_circuit_breaker_state
from habitplanet.resilience import CONTENT_BREAKER

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint():
    """Check-in, draw, rejection and collaborator metrics in Prometheus text format"""
    record_circuit_breaker_state(CONTENT_BREAKER.name, CONTENT_BREAKER.current_state)
    try:
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )
    except Exception as e:
        logger.error(f"Failed to render HabitPlanet metrics: {e}", exc_info=True)
        return Response(
            content="Metrics unavailable",
            status_code=500
        )
