"""
Exercise definitions for card-duel.

Each exercise is described by an ExerciseDefinition object that a game
card wraps and the difficulty scaler turns into a player target.
"""

from .base import CARD_TYPES, ExerciseDefinition, validate_exercise_definition
from .registry import EXERCISE_CATALOG, get_exercise, playable_exercises

__all__ = [
    "CARD_TYPES",
    "ExerciseDefinition",
    "validate_exercise_definition",
    "EXERCISE_CATALOG",
    "get_exercise",
    "playable_exercises",
]
