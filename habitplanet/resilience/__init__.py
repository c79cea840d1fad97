"""Resilience patterns for the content-generation collaborator"""

from habitplanet.resilience.circuit_breaker import (
    CONTENT_BREAKER,
    CircuitBreakerListener,
    with_circuit_breaker,
)

__all__ = [
    "CONTENT_BREAKER",
    "CircuitBreakerListener",
    "with_circuit_breaker",
]
