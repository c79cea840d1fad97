"""Unit tests for the content generation client"""
import asyncio
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from habitplanet.exceptions import ContentGenerationUnavailableError
from habitplanet.models import CheckInRecord, Habit, HabitType
from habitplanet.resilience import CONTENT_BREAKER
from habitplanet.services.content_generation import (
    CARD_ART_SIZE,
    ContentGenerationService,
    summarize_habits,
)


def test_summarize_habits():
    habits = [
        Habit(id="h1", user_id="u1", title="Run", type=HabitType.FITNESS, streak=3,
              is_completed_today=True, created_at=0),
        Habit(id="h2", user_id="u1", title="Read", created_at=0),
    ]
    check_ins = [
        CheckInRecord(id=f"r{i}", habit_id="h1", user_id="u1", timestamp=i, date_string="2024-03-09")
        for i in range(4)
    ]

    summary = summarize_habits(habits, check_ins)

    assert summary.splitlines() == [
        "- Run (Fitness): Streak 3, Completed Today: True, Total Checkins: 4",
        "- Read (Life): Streak 0, Completed Today: False, Total Checkins: 0",
    ]


def test_summarize_no_habits():
    assert summarize_habits([], []) == "- No habits yet"


def test_unconfigured_service(unconfigured_content):
    assert unconfigured_content.is_configured is False


@pytest.mark.asyncio
async def test_unconfigured_service_raises(unconfigured_content):
    with pytest.raises(ContentGenerationUnavailableError):
        await unconfigured_content.generate_advice([], [])
    with pytest.raises(ContentGenerationUnavailableError):
        await unconfigured_content.generate_card_art("Laozi", "The Founder")


@pytest.mark.asyncio
async def test_generate_card_art_request(content, mock_openai_client):
    url = await content.generate_card_art("Zhuangzi", "The Sage")

    assert url == "data:image/png;base64,aGVsbG8="
    kwargs = mock_openai_client.images.generate.call_args.kwargs
    assert kwargs["size"] == CARD_ART_SIZE
    assert kwargs["n"] == 1
    assert "Zhuangzi (The Sage)" in kwargs["prompt"]


@pytest.mark.asyncio
async def test_generate_card_art_url_response(content, mock_openai_client):
    mock_openai_client.images.generate = AsyncMock(return_value=SimpleNamespace(
        data=[SimpleNamespace(b64_json=None, url="https://cdn.example/card.png")]
    ))

    assert await content.generate_card_art("Laozi", "The Founder") == "https://cdn.example/card.png"


@pytest.mark.asyncio
async def test_generate_card_art_empty_response(content, mock_openai_client):
    mock_openai_client.images.generate = AsyncMock(return_value=SimpleNamespace(data=[]))

    assert await content.generate_card_art("Laozi", "The Founder") is None


@pytest.mark.asyncio
async def test_empty_advice_is_unavailable(content, mock_openai_client):
    mock_openai_client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="   "))]
    ))

    with pytest.raises(ContentGenerationUnavailableError):
        await content.generate_advice([], [])


@pytest.mark.asyncio
async def test_timeout_is_unavailable(mock_openai_client):
    async def slow(**kwargs):
        await asyncio.sleep(1)

    mock_openai_client.images.generate = slow
    service = ContentGenerationService(api_key="", client=mock_openai_client, timeout=0.01)

    with pytest.raises(ContentGenerationUnavailableError):
        await service.generate_card_art("Laozi", "The Founder")


@pytest.mark.asyncio
async def test_repeated_timeouts_open_the_circuit(mock_openai_client):
    calls = []

    async def hanging(**kwargs):
        calls.append(kwargs)
        await asyncio.sleep(10)

    mock_openai_client.images.generate = hanging
    service = ContentGenerationService(api_key="", client=mock_openai_client, timeout=0.01)

    for _ in range(CONTENT_BREAKER.fail_max):
        with pytest.raises(ContentGenerationUnavailableError):
            await service.generate_card_art("Laozi", "The Founder")

    assert CONTENT_BREAKER.current_state == "open"

    with pytest.raises(ContentGenerationUnavailableError):
        await service.generate_card_art("Laozi", "The Founder")
    assert len(calls) == CONTENT_BREAKER.fail_max


@pytest.mark.asyncio
async def test_repeated_failures_open_the_circuit(content, mock_openai_client):
    mock_openai_client.images.generate = AsyncMock(side_effect=RuntimeError("500"))

    for _ in range(CONTENT_BREAKER.fail_max):
        with pytest.raises(ContentGenerationUnavailableError):
            await content.generate_card_art("Laozi", "The Founder")

    assert CONTENT_BREAKER.current_state == "open"
    mock_openai_client.images.generate.reset_mock()

    with pytest.raises(ContentGenerationUnavailableError):
        await content.generate_card_art("Laozi", "The Founder")
    mock_openai_client.images.generate.assert_not_called()
