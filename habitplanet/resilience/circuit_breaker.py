"""Circuit breaker for the content-generation API

Stops calling the advice/card-art provider after repeated failures so draws
and advice requests degrade to their fallbacks immediately instead of waiting
for a timeout each time.

State Machine:
    CLOSED (normal) → OPEN (failing fast) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import asyncio
import pybreaker
import logging
from typing import Callable, Any, TypeVar
from functools import wraps

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitBreakerListener(pybreaker.CircuitBreakerListener):
    """Listener to log circuit breaker state changes and emit metrics"""

    def state_change(self, cb: pybreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        """Called when circuit breaker changes state"""
        old_name = old_state.name if old_state else "none"
        logger.warning(
            f"[CIRCUIT_BREAKER] {cb.name}: {old_name} → {new_state.name}"
        )

        from habitplanet.observability.metrics import record_circuit_breaker_state
        record_circuit_breaker_state(cb.name, new_state.name)

    def failure(self, cb: pybreaker.CircuitBreaker, exc: BaseException) -> None:
        """Called when circuit breaker records a failure"""
        logger.error(
            f"[CIRCUIT_BREAKER] {cb.name} recorded failure: {type(exc).__name__}: {exc}"
        )

    def success(self, cb: pybreaker.CircuitBreaker) -> None:
        """Called when circuit breaker records a success"""
        logger.debug(f"[CIRCUIT_BREAKER] {cb.name} recorded success")


# 5 failures trips OPEN, 60s before a HALF_OPEN trial call
CONTENT_BREAKER = pybreaker.CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="content_generation",
    listeners=[CircuitBreakerListener()]
)


def _raise(exc: BaseException) -> None:
    raise exc


def _passthrough(value: T) -> T:
    return value


def with_circuit_breaker(breaker: pybreaker.CircuitBreaker) -> Callable:
    """
    Decorator to wrap async functions with circuit breaker protection.

    The coroutine runs outside the breaker and its outcome is then replayed
    through breaker.call(), so failures and successes are counted by the
    breaker's own state machine. While the circuit is OPEN the coroutine is
    not awaited at all and CircuitBreakerError is raised.

    Example:
        @with_circuit_breaker(CONTENT_BREAKER)
        async def request_card_art():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            trial = False
            if breaker.current_state == pybreaker.STATE_OPEN:
                # Raises CircuitBreakerError until reset_timeout elapses;
                # afterwards this call is the HALF_OPEN trial
                breaker.call(_passthrough, None)
                trial = True

            try:
                result = await func(*args, **kwargs)
            except pybreaker.CircuitBreakerError:
                raise
            except asyncio.CancelledError:
                # The trial probe already closed the circuit
                if trial:
                    logger.warning(f"[CIRCUIT_BREAKER] {breaker.name} trial call cancelled, reopening")
                    breaker.open()
                raise
            except Exception as exc:
                if trial:
                    logger.warning(f"[CIRCUIT_BREAKER] {breaker.name} trial call failed, reopening")
                    breaker.open()
                    raise
                breaker.call(_raise, exc)
                raise
            return breaker.call(_passthrough, result)
        return wrapper
    return decorator
