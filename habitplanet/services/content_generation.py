"""
Content generation for habit advice and card artwork

Wraps the OpenAI API behind two calls the engines use:
- generate_advice(habits, check_ins) -> str
- generate_card_art(figure_name, figure_title) -> Optional[str]

Both raise ContentGenerationUnavailableError on any failure (missing key,
timeout, open circuit, provider error). Callers decide the fallback.
"""

import asyncio
import logging
from typing import Optional

from habitplanet.config import (
    OPENAI_API_KEY,
    ADVICE_MODEL,
    CARD_ART_MODEL,
    CONTENT_GENERATION_TIMEOUT,
)
from habitplanet.exceptions import ContentGenerationUnavailableError, wrap_external_exception
from habitplanet.models import Habit, CheckInRecord
from habitplanet.resilience import CONTENT_BREAKER, with_circuit_breaker

logger = logging.getLogger(__name__)

ADVICE_PROMPT = """You are a gamified habit tracker coach. Analyze the following user habit data:

{habit_summary}

Provide 3 short, punchy, actionable tips to help the user improve their habit consistency.
Suggest which time of day might suit each habit type.
Keep the tone friendly, encouraging and game-like (mention leveling up or keeping streaks). Use emojis.
Output format: Markdown bullet points."""

CARD_ART_PROMPT = (
    "Create a cute, vibrant, trading card style illustration of the Chinese Taoist figure: "
    "{name} ({title}). Style: flat vector art, colorful, sticker-like, white background, "
    "chibi proportions. The image should look like a collectible game card asset."
)

CARD_ART_SIZE = "1024x1536"  # portrait, close to a 3:4 card


def summarize_habits(habits: list[Habit], check_ins: list[CheckInRecord]) -> str:
    """One line per habit with its streak and progress"""
    if not habits:
        return "- No habits yet"

    totals: dict[str, int] = {}
    for record in check_ins:
        totals[record.habit_id] = totals.get(record.habit_id, 0) + 1

    return "\n".join(
        f"- {h.title} ({h.type.value}): Streak {h.streak}, "
        f"Completed Today: {h.is_completed_today}, "
        f"Total Checkins: {totals.get(h.id, 0)}"
        for h in habits
    )


class ContentGenerationService:
    """
    Client for the external content generator.

    Args:
        api_key: OpenAI API key; empty means the generator is unavailable
        advice_model: Chat model used for advice
        art_model: Image model used for card art
        timeout: Seconds before a call is abandoned
        client: Preconfigured AsyncOpenAI-compatible client (tests)
    """

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        advice_model: str = ADVICE_MODEL,
        art_model: str = CARD_ART_MODEL,
        timeout: float = CONTENT_GENERATION_TIMEOUT,
        client: Optional[object] = None
    ):
        self.advice_model = advice_model
        self.art_model = art_model
        self.timeout = timeout
        self._client = client
        if self._client is None and api_key:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=api_key)
        logger.debug(f"ContentGenerationService initialized (configured={self.is_configured})")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def _require_client(self, operation: str):
        if self._client is None:
            raise ContentGenerationUnavailableError(
                "OPENAI_API_KEY is not configured",
                service="Content generator",
                operation=operation
            )
        return self._client

    async def generate_advice(self, habits: list[Habit], check_ins: list[CheckInRecord]) -> str:
        """
        Ask the coach model for tips based on the user's habits

        Raises:
            ContentGenerationUnavailableError: on any failure or empty answer
        """
        client = self._require_client("generate_advice")
        prompt = ADVICE_PROMPT.format(habit_summary=summarize_habits(habits, check_ins))

        try:
            text = await self._request_advice(client, prompt)
        except Exception as e:
            raise wrap_external_exception(
                e,
                operation="generate_advice",
                fallback=ContentGenerationUnavailableError
            )

        if not text or not text.strip():
            raise ContentGenerationUnavailableError(
                "Advice model returned no text",
                service="OpenAI",
                operation="generate_advice"
            )
        return text.strip()

    async def generate_card_art(self, figure_name: str, figure_title: str) -> Optional[str]:
        """
        Render artwork for a card

        Returns:
            A data: URL with the PNG, or the provider's URL, or None when the
            provider answered without an image

        Raises:
            ContentGenerationUnavailableError: on any failure
        """
        client = self._require_client("generate_card_art")
        prompt = CARD_ART_PROMPT.format(name=figure_name, title=figure_title)

        try:
            return await self._request_card_art(client, prompt)
        except Exception as e:
            raise wrap_external_exception(
                e,
                operation="generate_card_art",
                context={"figure": figure_name},
                fallback=ContentGenerationUnavailableError
            )

    # wait_for runs inside the breaker, so a timeout is a recorded failure
    @with_circuit_breaker(CONTENT_BREAKER)
    async def _request_advice(self, client, prompt: str) -> Optional[str]:
        response = await asyncio.wait_for(
            client.chat.completions.create(
                model=self.advice_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=500
            ),
            timeout=self.timeout
        )
        return response.choices[0].message.content

    @with_circuit_breaker(CONTENT_BREAKER)
    async def _request_card_art(self, client, prompt: str) -> Optional[str]:
        response = await asyncio.wait_for(
            client.images.generate(
                model=self.art_model,
                prompt=prompt,
                size=CARD_ART_SIZE,
                n=1
            ),
            timeout=self.timeout
        )
        if not response.data:
            return None

        image = response.data[0]
        if getattr(image, "b64_json", None):
            return f"data:image/png;base64,{image.b64_json}"
        return getattr(image, "url", None)
