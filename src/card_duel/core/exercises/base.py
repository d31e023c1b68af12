"""
Base types for exercise definitions.

ExerciseDefinition is the immutable authored content a game card wraps.
A definition is either rep-based (base_reps) or time-based
(base_duration); utility and power cards carry neither because they
need no physical execution.
"""

from dataclasses import dataclass
from typing import Literal

from ..config import EXECUTION_CARD_TYPES
from ..errors import InvalidExerciseDefinition

CardType = Literal["exercise", "warmup", "utility", "power"]
CARD_TYPES: tuple[str, ...] = ("exercise", "warmup", "utility", "power")


@dataclass(frozen=True)
class ExerciseDefinition:
    """
    Full configuration for one exercise.

    Exactly one of base_reps / base_duration is expected on exercise and
    warmup definitions. Scaling tolerates the other shapes (reps take
    priority, a missing duration defaults to 30 s); use
    validate_exercise_definition() to reject them explicitly.
    """

    # Identity
    exercise_id: str          # e.g. "push_ups", "plank_hold"
    display_name: str         # e.g. "Push-ups"
    description: str
    category: str             # e.g. "cardio", "strength", "warmup", "utility"

    # Baseline prescription at difficulty level 5
    base_reps: int | None = None
    base_duration: int | None = None  # seconds

    card_type: CardType = "exercise"
    instructions: str = ""

    def __post_init__(self) -> None:
        """Validate base values."""
        if not self.exercise_id:
            raise InvalidExerciseDefinition("exercise_id must be non-empty")
        if self.base_reps is not None and self.base_reps <= 0:
            raise InvalidExerciseDefinition(
                f"{self.exercise_id}: base_reps must be positive, got {self.base_reps}"
            )
        if self.base_duration is not None and self.base_duration <= 0:
            raise InvalidExerciseDefinition(
                f"{self.exercise_id}: base_duration must be positive, got {self.base_duration}"
            )
        if self.card_type not in CARD_TYPES:
            raise InvalidExerciseDefinition(
                f"{self.exercise_id}: invalid card_type {self.card_type!r}. "
                f"Must be one of {CARD_TYPES}"
            )

    @property
    def is_rep_based(self) -> bool:
        return self.base_reps is not None

    @property
    def requires_execution(self) -> bool:
        """True for exercise and warmup definitions."""
        return self.card_type in EXECUTION_CARD_TYPES


def validate_exercise_definition(exercise: ExerciseDefinition) -> ExerciseDefinition:
    """
    Reject definitions that rely on the scaling fallback.

    Args:
        exercise: Definition to check

    Returns:
        The definition if it has exactly one base value (or needs none)

    Raises:
        InvalidExerciseDefinition: If an exercise/warmup definition has
            both or neither of base_reps / base_duration
    """
    if not exercise.requires_execution:
        return exercise

    has_reps = exercise.base_reps is not None
    has_duration = exercise.base_duration is not None
    if has_reps and has_duration:
        raise InvalidExerciseDefinition(
            f"{exercise.exercise_id}: both base_reps and base_duration are set"
        )
    if not has_reps and not has_duration:
        raise InvalidExerciseDefinition(
            f"{exercise.exercise_id}: neither base_reps nor base_duration is set"
        )
    return exercise
