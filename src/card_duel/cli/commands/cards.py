"""Card commands: catalog, scale."""

import json
from typing import Annotated, Optional

import typer

from ...core.deck import card_points, category_difficulty
from ...core.errors import InvalidExerciseDefinition
from ...core.exercises.registry import get_exercise, playable_exercises
from ...core.scaling import estimate_workout_minutes, scale_exercise
from ...io.serializers import (
    ValidationError,
    exercise_to_dict,
    target_to_dict,
    validate_difficulty_level,
)
from .. import views
from ..app import JsonOption, LevelOption, app


@app.command()
def catalog(
    level: LevelOption = 5,
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Only show one category (e.g. strength, warmup)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise catalog with targets scaled for a level.
    """
    try:
        validate_difficulty_level(level)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    exercises = playable_exercises()
    if category is not None:
        exercises = [ex for ex in exercises if ex.category == category]
        if not exercises:
            views.print_error(f"No exercises in category '{category}'.")
            raise typer.Exit(1)

    rows = [
        (ex, scale_exercise(ex, level) if ex.requires_execution else None)
        for ex in exercises
    ]
    minutes = estimate_workout_minutes(exercises, level)

    if json_out:
        print(json.dumps({
            "level": level,
            "estimated_minutes": minutes,
            "exercises": [
                {
                    **exercise_to_dict(ex),
                    "points": card_points(ex),
                    "difficulty": category_difficulty(ex.category),
                    "target": target_to_dict(target),
                }
                for ex, target in rows
            ],
        }, indent=2, ensure_ascii=False))
        return

    views.print_catalog(rows, level, minutes)


@app.command()
def scale(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. push_ups")],
    level: LevelOption = 5,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Reject definitions with both or neither base value"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Show the scaled target for one exercise.
    """
    try:
        validate_difficulty_level(level)
        exercise = get_exercise(exercise_id)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not exercise.requires_execution:
        views.print_info(f"'{exercise_id}' is a {exercise.card_type} card; it has no target.")
        raise typer.Exit(0)

    try:
        target = scale_exercise(exercise, level, strict=strict)
    except InvalidExerciseDefinition as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "exercise_id": exercise.exercise_id,
            "level": level,
            "target": target_to_dict(target),
        }, indent=2))
        return

    views.print_scaled_target(exercise, level, target)
