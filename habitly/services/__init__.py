"""
Habitly services: the habit engine and the helpers built on its read API.
"""

from .habit_engine import HabitEngine, create_habit_engine

__all__ = [
    'HabitEngine',
    'create_habit_engine',
]
