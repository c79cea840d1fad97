"""
Service Layer Package

Business logic services between the API layer and the stores.

Core Services:
- HabitService: Habit lifecycle, day rollover, check-ins and rewards
- GachaService: Card draws
- UserService: Accounts, profile, stats, advice

External Integration Services:
- ContentGenerationService: Advice text and card art
"""

from habitplanet.services.container import ServiceContainer, get_container, init_container, reset_container
from habitplanet.services.content_generation import ContentGenerationService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "reset_container",
    "ContentGenerationService",
]
