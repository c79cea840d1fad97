"""
Card draw (gacha) rules

Rarity Table (r uniform in [0, 1), strict comparisons, highest tier first):
- r > 0.95: Legendary (5%)
- r > 0.85: Epic (10%)
- r > 0.60: Rare (25%)
- otherwise: Common (60%)

Figure is picked uniformly from a fixed roster, independent of rarity.
Value = floor(uniform(10, 50) * rarity multiplier).

All randomness comes from an injected random.Random-compatible source
(random(), uniform(), choice()) so draws can be pinned in tests.
"""

from dataclasses import dataclass
import logging
import math
import random

from habitplanet.models import Rarity

logger = logging.getLogger(__name__)

# Evaluated in order; first threshold exceeded wins
RARITY_THRESHOLDS = [
    (0.95, Rarity.LEGENDARY),
    (0.85, Rarity.EPIC),
    (0.60, Rarity.RARE),
]

BASE_VALUE_MIN = 10
BASE_VALUE_MAX = 50


@dataclass(frozen=True)
class Figure:
    """A collectible figure that can appear on a card"""
    name: str
    title: str


FIGURES = (
    Figure("Laozi", "The Founder"),
    Figure("Zhuangzi", "The Sage"),
    Figure("Zhang Daoling", "Celestial Master"),
    Figure("Lu Dongbin", "Sword Immortal"),
    Figure("He Xiangu", "Lotus Immortal"),
    Figure("Jade Emperor", "Ruler of Heaven"),
)


def rarity_for_roll(r: float) -> Rarity:
    """
    Map a uniform roll to a rarity tier

    Boundary values fall to the lower tier: 0.95 is Epic, 0.60 is Common.
    """
    for threshold, rarity in RARITY_THRESHOLDS:
        if r > threshold:
            return rarity
    return Rarity.COMMON


def roll_rarity(rng: random.Random) -> Rarity:
    return rarity_for_roll(rng.random())


def pick_figure(rng: random.Random) -> Figure:
    return rng.choice(FIGURES)


def roll_value(rng: random.Random, rarity: Rarity) -> int:
    """Card value; two cards of the same rarity and figure usually differ"""
    base = rng.uniform(BASE_VALUE_MIN, BASE_VALUE_MAX)
    return math.floor(base * rarity.multiplier)


@dataclass(frozen=True)
class DrawOutcome:
    """The random part of a draw, before art and persistence"""
    rarity: Rarity
    figure: Figure
    value: int


def roll_draw(rng: random.Random) -> DrawOutcome:
    """Roll rarity, then figure, then value, in that order"""
    rarity = roll_rarity(rng)
    figure = pick_figure(rng)
    value = roll_value(rng, rarity)
    logger.debug(f"Rolled {rarity.value} {figure.name} worth {value}")
    return DrawOutcome(rarity=rarity, figure=figure, value=value)


def describe_card(figure: Figure, rarity: Rarity) -> str:
    return f"{rarity.value} card of {figure.name}, {figure.title}."
