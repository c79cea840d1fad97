"""
Gamification rules for HabitPlanet

This module holds the pure rules the engines apply:
- Day rollover and streak tracking
- Coin rewards and pet leveling
- Card draw probabilities and values
"""

from habitplanet.gamification.streak_system import apply_day_rollover, calculate_new_streak
from habitplanet.gamification.rewards import award_check_in_rewards, calculate_check_in_coins
from habitplanet.gamification.gacha import FIGURES, Figure, roll_draw, rarity_for_roll

__all__ = [
    "apply_day_rollover",
    "calculate_new_streak",
    "award_check_in_rewards",
    "calculate_check_in_coins",
    "FIGURES",
    "Figure",
    "roll_draw",
    "rarity_for_roll",
]
