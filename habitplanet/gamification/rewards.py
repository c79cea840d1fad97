"""
Check-in rewards and pet leveling

Reward Rules (per successful check-in):
- Coins: 10 base
  - +5 when the new streak is longer than 7 days
  - +2 when the new streak is longer than 3 days
- Pet experience: 15 flat

Leveling Curve:
- Every level needs 100 experience; leftover experience carries over
"""

import logging

from habitplanet.models import User, CheckInRewards, PET_EXP_PER_LEVEL

logger = logging.getLogger(__name__)

BASE_COINS = 10
LONG_STREAK_DAYS = 7
LONG_STREAK_BONUS = 5
SHORT_STREAK_DAYS = 3
SHORT_STREAK_BONUS = 2
CHECK_IN_EXP = 15


def calculate_streak_bonus(streak: int) -> int:
    """Extra coins for keeping a streak going"""
    if streak > LONG_STREAK_DAYS:
        return LONG_STREAK_BONUS
    if streak > SHORT_STREAK_DAYS:
        return SHORT_STREAK_BONUS
    return 0


def calculate_check_in_coins(streak: int) -> int:
    """
    Coins awarded for a check-in given the streak after it

    Examples:
        streak 2 -> 10, streak 5 -> 12, streak 8 -> 15
    """
    return BASE_COINS + calculate_streak_bonus(streak)


def apply_pet_exp(user: User, amount: int) -> int:
    """
    Add experience to the user's pet, leveling up as many times as it covers

    Returns:
        Number of levels gained
    """
    user.pet_exp += amount
    levels_gained = 0

    while user.pet_exp >= PET_EXP_PER_LEVEL:
        user.pet_exp -= PET_EXP_PER_LEVEL
        user.pet_level += 1
        levels_gained += 1

    if levels_gained:
        logger.info(f"Pet of user {user.id} leveled up to {user.pet_level}!")

    return levels_gained


def award_check_in_rewards(user: User, new_streak: int) -> CheckInRewards:
    """
    Credit coins and pet experience for one check-in

    Mutates the given user; callers pass a working copy and commit it.
    """
    coins = calculate_check_in_coins(new_streak)
    user.coins += coins
    levels_gained = apply_pet_exp(user, CHECK_IN_EXP)

    logger.info(
        f"Awarded {coins} coins and {CHECK_IN_EXP} exp to user {user.id} "
        f"(streak {new_streak}). Balance: {user.coins}, Level: {user.pet_level}"
    )

    return CheckInRewards(
        coins=coins,
        exp=CHECK_IN_EXP,
        level_up=levels_gained > 0,
        new_level=user.pet_level if levels_gained > 0 else None,
    )
