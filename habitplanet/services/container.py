"""
Service Container - Dependency Injection Container

Simple DI container for managing service instances and their dependencies.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import random

from habitplanet.db.stores import StateStore
from habitplanet.utils.datetime_helpers import Clock
from habitplanet.utils.locks import UserLockRegistry

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (state, clock, content generator, rng) are injected.
    """

    # Infrastructure dependencies (injected)
    state: StateStore
    clock: Clock = field(default_factory=Clock)
    content: Optional[object] = None  # ContentGenerationService; built from config when omitted
    rng: Optional[random.Random] = None
    locks: UserLockRegistry = field(default_factory=UserLockRegistry)

    # Services (lazy-loaded via properties)
    _habit_service: Optional[object] = field(default=None, init=False, repr=False)
    _gacha_service: Optional[object] = field(default=None, init=False, repr=False)
    _user_service: Optional[object] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.content is None:
            from habitplanet.services.content_generation import ContentGenerationService
            self.content = ContentGenerationService()

    @property
    def habit_service(self):
        """Get HabitService instance (lazy-loaded)"""
        if self._habit_service is None:
            from habitplanet.services.habit_service import HabitService
            self._habit_service = HabitService(self.state, self.clock, self.locks)
            logger.debug("HabitService instantiated")
        return self._habit_service

    @property
    def gacha_service(self):
        """Get GachaService instance (lazy-loaded)"""
        if self._gacha_service is None:
            from habitplanet.services.gacha_service import GachaService
            self._gacha_service = GachaService(
                self.state,
                self.clock,
                self.locks,
                self.content,
                self.rng
            )
            logger.debug("GachaService instantiated")
        return self._gacha_service

    @property
    def user_service(self):
        """Get UserService instance (lazy-loaded)"""
        if self._user_service is None:
            from habitplanet.services.user_service import UserService
            self._user_service = UserService(self.state, self.clock, self.locks, self.content)
            logger.debug("UserService instantiated")
        return self._user_service


# Global container instance (initialized at application startup)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() at startup before using services."
        )
    return _container


def init_container(
    state: StateStore,
    clock: Optional[Clock] = None,
    content: Optional[object] = None,
    rng: Optional[random.Random] = None
) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        state: Loaded StateStore
        clock: Clock override (tests)
        content: ContentGenerationService override (tests)
        rng: Random source override (tests)

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(
        state=state,
        clock=clock or Clock(),
        content=content,
        rng=rng
    )

    logger.info("Service container initialized")
    return _container


def reset_container() -> None:
    """Drop the global container (shutdown and tests)"""
    global _container
    _container = None
