"""
Adaptive difficulty scaling.

Converts a static exercise definition into a player-specific target:

    multiplier = level / 5
    reps       = max(3,  round(base_reps * multiplier))
    duration   = max(10, round((base_duration or 30) * multiplier))

Level 5 is the unscaled baseline, level 1 is 0.2×, level 10 is 2.0×.
Rounding is half-up so 2.5 → 3.
"""

import math
from collections.abc import Iterable

from .config import (
    BASELINE_DIFFICULTY_LEVEL,
    DEFAULT_BASE_DURATION_SECONDS,
    MIN_TARGET_DURATION_SECONDS,
    MIN_TARGET_REPS,
    SECONDS_PER_REP,
    TRANSITION_SECONDS,
)
from .exercises.base import ExerciseDefinition, validate_exercise_definition
from .models import ExerciseTarget


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def difficulty_multiplier(difficulty_level: int) -> float:
    """
    Scale factor for a player difficulty level.

    Args:
        difficulty_level: Player level, nominally 1..10

    Returns:
        difficulty_level / 5
    """
    return difficulty_level / BASELINE_DIFFICULTY_LEVEL


def scale_exercise(
    exercise: ExerciseDefinition,
    difficulty_level: int,
    *,
    strict: bool = False,
) -> ExerciseTarget:
    """
    Compute the player's target for one exercise.

    Reps take priority whenever base_reps is set, regardless of
    base_duration.  Out-of-range levels are not clamped here; the floors
    still hold for any level.

    Args:
        exercise: Exercise definition to scale
        difficulty_level: Player difficulty level (caller validates 1..10)
        strict: Reject definitions with both or neither base value

    Returns:
        ExerciseTarget with reps ≥ 3 or duration ≥ 10

    Raises:
        InvalidExerciseDefinition: Only when strict=True and the definition
            relies on the fallback
    """
    if strict:
        validate_exercise_definition(exercise)

    multiplier = difficulty_multiplier(difficulty_level)

    if exercise.base_reps is not None:
        reps = _round_half_up(exercise.base_reps * multiplier)
        return ExerciseTarget(reps=max(MIN_TARGET_REPS, reps))

    base_duration = exercise.base_duration or DEFAULT_BASE_DURATION_SECONDS
    duration = _round_half_up(base_duration * multiplier)
    return ExerciseTarget(duration=max(MIN_TARGET_DURATION_SECONDS, duration))


def estimate_workout_minutes(
    exercises: Iterable[ExerciseDefinition],
    difficulty_level: int,
) -> int:
    """
    Rough wall-clock estimate for playing through a set of exercises.

    Timed targets count their duration, rep targets ~3 s per rep, and each
    card adds a 10 s transition.  Cards without physical execution only
    add the transition.

    Args:
        exercises: Exercises in play order
        difficulty_level: Player difficulty level

    Returns:
        Estimated minutes, rounded up (0 for an empty list)
    """
    total_seconds = 0
    for exercise in exercises:
        if exercise.requires_execution:
            target = scale_exercise(exercise, difficulty_level)
            if target.duration is not None:
                total_seconds += target.duration
            else:
                total_seconds += (target.reps or 0) * SECONDS_PER_REP
        total_seconds += TRANSITION_SECONDS

    return math.ceil(total_seconds / 60)
