"""
Prometheus metrics definitions for habitplanet.

Organized by category:
- Check-in metrics: check-ins, coins awarded, pet level-ups
- Gacha metrics: draws by rarity
- Rejections: validation failures by reason
- Collaborators: storage and content-generation failures, circuit state

Metrics are exposed at the /metrics endpoint for Prometheus scraping.
"""

import logging
from prometheus_client import Counter, Enum

logger = logging.getLogger(__name__)

# =============================================================================
# Check-in Metrics
# =============================================================================

check_ins_total = Counter(
    "habitplanet_check_ins_total",
    "Total successful habit check-ins",
    ["habit_type"],
)

coins_awarded_total = Counter(
    "habitplanet_coins_awarded_total",
    "Total coins awarded by check-ins",
)

pet_level_ups_total = Counter(
    "habitplanet_pet_level_ups_total",
    "Total pet level-ups",
)

# =============================================================================
# Gacha Metrics
# =============================================================================

card_draws_total = Counter(
    "habitplanet_card_draws_total",
    "Total cards drawn",
    ["rarity", "has_image"],
)

# =============================================================================
# Rejected Operations
# =============================================================================

operations_rejected_total = Counter(
    "habitplanet_operations_rejected_total",
    "Engine operations rejected before mutation",
    ["operation", "reason"],  # reason: NotFoundError/AlreadyCompletedError/...
)

# =============================================================================
# Collaborator Metrics
# =============================================================================

storage_failures_total = Counter(
    "habitplanet_storage_failures_total",
    "Persistence writes that failed",
    ["record_set"],
)

content_generation_failures_total = Counter(
    "habitplanet_content_generation_failures_total",
    "Content generation calls that degraded to a fallback",
    ["operation"],  # advice / card_art
)

circuit_breaker_state = Enum(
    "habitplanet_circuit_breaker_state",
    "Current state of circuit breaker",
    ["breaker"],
    states=["closed", "open", "half-open"],
)


def record_check_in(habit_type: str, coins: int, level_up: bool) -> None:
    try:
        check_ins_total.labels(habit_type=habit_type).inc()
        coins_awarded_total.inc(coins)
        if level_up:
            pet_level_ups_total.inc()
    except Exception as e:
        logger.error(f"Failed to record check-in metrics: {e}")


def record_card_draw(rarity: str, has_image: bool) -> None:
    try:
        card_draws_total.labels(rarity=rarity, has_image=str(has_image).lower()).inc()
    except Exception as e:
        logger.error(f"Failed to record card draw: {e}")


def record_rejection(operation: str, reason: str) -> None:
    try:
        operations_rejected_total.labels(operation=operation, reason=reason).inc()
    except Exception as e:
        logger.error(f"Failed to record rejection: {e}")


def record_storage_failure(record_set: str) -> None:
    try:
        storage_failures_total.labels(record_set=record_set).inc()
    except Exception as e:
        logger.error(f"Failed to record storage failure: {e}")


def record_content_generation_failure(operation: str) -> None:
    try:
        content_generation_failures_total.labels(operation=operation).inc()
    except Exception as e:
        logger.error(f"Failed to record content generation failure: {e}")


def record_circuit_breaker_state(breaker: str, state: str) -> None:
    """
    Record circuit breaker state change.

    Args:
        breaker: Breaker name (content_generation)
        state: New state (closed, open, half-open)
    """
    try:
        circuit_breaker_state.labels(breaker=breaker).state(state)
        logger.debug(f"[METRICS] Circuit breaker {breaker} state: {state}")
    except Exception as e:
        logger.error(f"Failed to record circuit breaker state: {e}")
