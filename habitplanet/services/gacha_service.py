"""
GachaService - Card draw engine

Spends coins on a randomized collectible card. Rarity, figure and value come
from habitplanet.gamification.gacha; artwork comes from the content generator
and is optional.
"""

import logging
import random
from typing import Optional

from habitplanet.config import DRAW_COST
from habitplanet.db.stores import StateStore
from habitplanet.exceptions import (
    ContentGenerationUnavailableError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from habitplanet.gamification.gacha import Figure, describe_card, roll_draw
from habitplanet.models import Card, DrawResult, User
from habitplanet.observability.metrics import (
    record_card_draw,
    record_content_generation_failure,
    record_rejection,
)
from habitplanet.services.content_generation import ContentGenerationService
from habitplanet.utils.datetime_helpers import Clock
from habitplanet.utils.ids import new_id
from habitplanet.utils.locks import UserLockRegistry

logger = logging.getLogger(__name__)


class GachaService:
    """
    Service for card draws.

    The coin debit and the new card are committed in one step after the
    artwork call resolves, so a draw either fully happens or leaves the user
    untouched. Art failures produce a card without an image.
    """

    def __init__(
        self,
        state: StateStore,
        clock: Clock,
        locks: UserLockRegistry,
        content: ContentGenerationService,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize GachaService.

        Args:
            state: In-memory stores plus their persistence
            clock: Timestamps for obtained_at
            locks: Per-user exclusive sections
            content: Card-art generator
            rng: random.Random-compatible source (random/uniform/choice)
        """
        self.state = state
        self.clock = clock
        self.locks = locks
        self.content = content
        self.rng = rng or random.Random()
        logger.debug("GachaService initialized")

    def _require_user(self, user_id: str) -> User:
        user = self.state.users.get(user_id)
        if user is None:
            record_rejection("draw_card", "NotFoundError")
            raise NotFoundError(
                f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id,
                operation="draw_card"
            )
        return user

    async def _generate_art(self, figure: Figure) -> Optional[str]:
        """Card art, or None when generation is unavailable"""
        try:
            return await self.content.generate_card_art(figure.name, figure.title)
        except ContentGenerationUnavailableError as e:
            record_content_generation_failure("card_art")
            logger.warning(f"Issuing {figure.name} card without image: {e.message}")
            return None

    async def draw_card(self, user_id: str, cost: int = DRAW_COST) -> DrawResult:
        """
        Draw one card for `cost` coins.

        Raises:
            NotFoundError: unknown user
            InsufficientFundsError: balance below cost (nothing changes)
            ValidationError: non-positive cost
        """
        if cost <= 0:
            record_rejection("draw_card", "ValidationError")
            raise ValidationError(
                "Draw cost must be positive",
                field="cost",
                value=cost,
                user_id=user_id,
                operation="draw_card"
            )

        async with self.locks.for_user(user_id):
            user = self._require_user(user_id)

            if user.coins < cost:
                record_rejection("draw_card", "InsufficientFundsError")
                raise InsufficientFundsError(
                    balance=user.coins,
                    cost=cost,
                    user_id=user_id,
                    operation="draw_card"
                )

            outcome = roll_draw(self.rng)
            image_url = await self._generate_art(outcome.figure)

            card = Card(
                id=new_id(),
                name=outcome.figure.name,
                title=outcome.figure.title,
                rarity=outcome.rarity,
                value=outcome.value,
                image_url=image_url,
                description=describe_card(outcome.figure, outcome.rarity),
                obtained_at=self.clock.now_ms(),
            )

            # The lock has been held since the balance check
            updated_user = user.model_copy(deep=True)
            updated_user.coins -= cost
            updated_user.collected_cards.append(card)
            self.state.users.put(updated_user)

            warnings = await self.state.persist(users=True)

            record_card_draw(card.rarity.value, image_url is not None)
            logger.info(
                f"User {user_id} drew {card.rarity.value} {card.name} (value {card.value}) "
                f"for {cost} coins. Remaining: {updated_user.coins}"
            )

            return DrawResult(
                card=card,
                remaining_coins=updated_user.coins,
                warnings=warnings,
            )
