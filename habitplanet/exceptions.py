"""
Standardized exception hierarchy for habitplanet
Provides rich context, consistent logging, and user-friendly error messages
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Type
from uuid import uuid4
import logging

import httpx
import openai
import pybreaker

logger = logging.getLogger(__name__)


class HabitPlanetError(Exception):
    """
    Base exception for all habitplanet errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise HabitPlanetError(
            message="Failed to save habit",
            user_id="u1",
            operation="create_habit",
            context={"habit_id": "abc-123"}
        )
    """

    status_code: int = 500
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


def _merge_context(extra: Optional[Dict[str, Any]], base: Dict[str, Any]) -> Dict[str, Any]:
    """Combine a subclass's own context fields with caller-supplied context"""
    merged = dict(base)
    merged.update(extra or {})
    return merged


# ==========================================
# Validation Errors (rejected before any mutation)
# ==========================================

class ValidationError(HabitPlanetError):
    """
    Raised when user input fails validation

    Example:
        raise ValidationError(
            message="target_count must be at least 1",
            field="target_count",
            value=0,
            user_id="u1"
        )
    """

    status_code = 422
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", f"Invalid {field}: {message}" if field else message)
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"field": field, "value": value}),
            **kwargs
        )


class NotFoundError(HabitPlanetError):
    """Referenced habit, subtask or user does not exist"""

    status_code = 404
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        kwargs.setdefault("user_message", f"{record_type or 'Record'} not found.")
        super().__init__(
            message=message,
            context=_merge_context(
                kwargs.pop("context", None),
                {"record_type": record_type, "record_id": record_id}
            ),
            **kwargs
        )


class AlreadyCompletedError(HabitPlanetError):
    """Single-target habit was already checked in today"""

    status_code = 409
    log_level = logging.WARNING

    def __init__(self, message: str = "Already completed today", habit_id: Optional[str] = None, **kwargs):
        self.habit_id = habit_id
        kwargs.setdefault("user_message", "You already checked in on this habit today. Come back tomorrow!")
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"habit_id": habit_id}),
            **kwargs
        )


class InsufficientFundsError(HabitPlanetError):
    """Card draw attempted without enough coins"""

    status_code = 402
    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Insufficient coins",
        balance: Optional[int] = None,
        cost: Optional[int] = None,
        **kwargs
    ):
        self.balance = balance
        self.cost = cost
        kwargs.setdefault("user_message", f"You need {cost} coins to draw a card but only have {balance}.")
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"balance": balance, "cost": cost}),
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageFailureError(HabitPlanetError):
    """
    Persistence write (or read) was rejected, e.g. quota exceeded

    Non-fatal: the in-memory state stays authoritative for the session.
    """

    status_code = 507

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        self.key = key
        kwargs.setdefault("user_message", "Your progress could not be saved. It is kept for this session.")
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"key": key}),
            **kwargs
        )


# ==========================================
# External Content Generation
# ==========================================

class ContentGenerationUnavailableError(HabitPlanetError):
    """
    Advice or card-art generator is unreachable, misconfigured or timed out

    Never aborts the owning operation; callers degrade to a fallback value.
    """

    status_code = 503
    log_level = logging.WARNING

    def __init__(self, message: str, service: Optional[str] = None, **kwargs):
        self.service = service
        kwargs.setdefault("user_message", f"{service or 'Content generation'} is unavailable right now.")
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"service": service}),
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(HabitPlanetError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        kwargs.setdefault("user_message", "The system is not properly configured. Please contact support.")
        super().__init__(
            message=message,
            context=_merge_context(kwargs.pop("context", None), {"config_key": config_key}),
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    fallback: Type[HabitPlanetError] = HabitPlanetError
) -> HabitPlanetError:
    """
    Wrap external exceptions (OSError, openai, httpx, timeouts) into our hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context
        fallback: Class used for errors not recognized below

    Returns:
        Appropriate HabitPlanetError subclass

    Example:
        try:
            path.write_text(payload)
        except OSError as e:
            raise wrap_external_exception(e, operation="save_habits")
    """
    if isinstance(error, HabitPlanetError):
        return error

    # TimeoutError subclasses OSError on 3.11+, so check it first
    if isinstance(error, asyncio.TimeoutError):
        return ContentGenerationUnavailableError(
            message=f"{operation} timed out",
            service="Content generator",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    if isinstance(error, OSError):
        return StorageFailureError(
            message=f"Storage operation failed: {error}",
            key=(context or {}).get("key"),
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    if isinstance(error, pybreaker.CircuitBreakerError):
        return ContentGenerationUnavailableError(
            message=f"{operation} skipped: circuit open",
            service="Content generator",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    if isinstance(error, openai.OpenAIError):
        return ContentGenerationUnavailableError(
            message=f"OpenAI request failed: {error}",
            service="OpenAI",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    if isinstance(error, httpx.HTTPError):
        return ContentGenerationUnavailableError(
            message=f"HTTP request failed: {error}",
            service="Content generator",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    return fallback(
        message=f"{operation} failed: {error}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
