"""HabitPlanet - gamified habit tracker with pet progression and card draws"""

__version__ = "1.0.0"
