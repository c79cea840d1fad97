"""Unit tests for custom exception hierarchy"""
import asyncio
from datetime import datetime

import pybreaker

from habitplanet.exceptions import (
    AlreadyCompletedError,
    ConfigurationError,
    ContentGenerationUnavailableError,
    HabitPlanetError,
    InsufficientFundsError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
    wrap_external_exception,
)


class TestHabitPlanetError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = HabitPlanetError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)
        assert error.status_code == 500

    def test_exception_with_context(self):
        error = HabitPlanetError(
            message="Save failed",
            user_id="u1",
            operation="create_habit",
            context={"habit_id": "abc-123"},
            user_message="Could not save your habit"
        )
        assert error.user_id == "u1"
        assert error.operation == "create_habit"
        assert error.context["habit_id"] == "abc-123"
        assert error.user_message == "Could not save your habit"

    def test_to_dict(self):
        error = HabitPlanetError("Test error", user_message="Oops")
        data = error.to_dict()
        assert data["error"] == "HabitPlanetError"
        assert data["message"] == "Test error"
        assert data["user_message"] == "Oops"
        assert "request_id" in data
        assert "timestamp" in data


class TestDomainErrors:
    def test_validation_error_fields(self):
        error = ValidationError("too long", field="note", value=1200)
        assert error.status_code == 422
        assert error.context == {"field": "note", "value": 1200}
        assert "note" in error.user_message

    def test_caller_context_is_merged(self):
        error = NotFoundError(
            "Habit h1 not found",
            record_type="Habit",
            record_id="h1",
            context={"user": "u1"}
        )
        assert error.context == {"record_type": "Habit", "record_id": "h1", "user": "u1"}
        assert error.status_code == 404

    def test_caller_user_message_wins(self):
        error = StorageFailureError("disk full", key="habits", user_message="custom")
        assert error.user_message == "custom"

    def test_already_completed_default_message(self):
        error = AlreadyCompletedError(habit_id="h1")
        assert error.message == "Already completed today"
        assert error.status_code == 409

    def test_insufficient_funds(self):
        error = InsufficientFundsError(balance=40, cost=100)
        assert error.status_code == 402
        assert error.context == {"balance": 40, "cost": 100}
        assert "100" in error.user_message

    def test_content_generation_status(self):
        assert ContentGenerationUnavailableError("down").status_code == 503

    def test_configuration_error(self):
        error = ConfigurationError("bad", config_key="DRAW_COST")
        assert error.config_key == "DRAW_COST"


class TestWrapExternalException:
    def test_passes_through_our_errors(self):
        original = NotFoundError("missing")
        assert wrap_external_exception(original, operation="x") is original

    def test_os_error_becomes_storage_failure(self):
        wrapped = wrap_external_exception(
            OSError("No space left on device"),
            operation="kv_set",
            context={"key": "habitplanet_habits"}
        )
        assert isinstance(wrapped, StorageFailureError)
        assert wrapped.key == "habitplanet_habits"
        assert isinstance(wrapped.cause, OSError)

    def test_timeout_becomes_content_unavailable(self):
        wrapped = wrap_external_exception(asyncio.TimeoutError(), operation="generate_advice")
        assert isinstance(wrapped, ContentGenerationUnavailableError)

    def test_open_circuit_becomes_content_unavailable(self):
        wrapped = wrap_external_exception(pybreaker.CircuitBreakerError("open"), operation="generate_card_art")
        assert isinstance(wrapped, ContentGenerationUnavailableError)

    def test_unknown_error_uses_fallback(self):
        wrapped = wrap_external_exception(
            RuntimeError("boom"),
            operation="generate_card_art",
            fallback=ContentGenerationUnavailableError
        )
        assert isinstance(wrapped, ContentGenerationUnavailableError)

    def test_unknown_error_default(self):
        wrapped = wrap_external_exception(RuntimeError("boom"), operation="x")
        assert type(wrapped) is HabitPlanetError
        assert "boom" in wrapped.message
