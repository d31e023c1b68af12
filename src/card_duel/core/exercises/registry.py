"""
Exercise catalog.

All authored exercises are registered here.  Use get_exercise() to
look up an ExerciseDefinition by its exercise_id string.

Exercises are loaded from per-exercise YAML files in the bundled
``src/card_duel/exercises/`` directory at import time.  If nothing can
be loaded a RuntimeError is raised, since a deck cannot be built
without exercise definitions.

User overrides: place matching files in ``~/.card-duel/exercises/``.
"""

from .base import ExerciseDefinition


def _build_catalog() -> dict[str, ExerciseDefinition]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "card-duel: no exercise definitions could be loaded from YAML. "
            "Check that src/card_duel/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_CATALOG: dict[str, ExerciseDefinition] = _build_catalog()


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """
    Return the ExerciseDefinition for the given exercise_id.

    Args:
        exercise_id: Any exercise in the catalog (e.g. "push_ups")

    Returns:
        ExerciseDefinition for the requested exercise

    Raises:
        ValueError: If exercise_id is not in the catalog
    """
    if exercise_id not in EXERCISE_CATALOG:
        valid = ", ".join(EXERCISE_CATALOG)
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return EXERCISE_CATALOG[exercise_id]


def playable_exercises() -> list[ExerciseDefinition]:
    """Return catalog entries in id order, for deck building."""
    return [EXERCISE_CATALOG[k] for k in sorted(EXERCISE_CATALOG)]
