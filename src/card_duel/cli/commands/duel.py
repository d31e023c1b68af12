"""Duel commands: affect, simulate."""

import json
import warnings
from typing import Annotated, Optional

import typer

from ...core.affect import derive_emotion, emotion_for_event, opponent_confidence
from ...core.duel import simulate_duel
from ...core.errors import IllegalTransition, UnauthorizedSkip
from ...core.exercises.registry import playable_exercises
from ...core.models import GAME_EVENTS, SessionSignals
from ...io.serializers import (
    ValidationError,
    confidence_to_dict,
    duel_result_to_dict,
    validate_difficulty_level,
    validate_emotion,
    validate_non_negative,
)
from .. import views
from ..app import JsonOption, LevelOption, RulesOption, app, get_rules


@app.command()
def affect(
    player: Annotated[int, typer.Option("--player", "-p", help="Player score")] = 0,
    ai: Annotated[int, typer.Option("--ai", "-a", help="Opponent score")] = 0,
    opponent_turn: Annotated[
        bool,
        typer.Option("--opponent-turn", help="It is the opponent's turn"),
    ] = False,
    override: Annotated[
        Optional[str],
        typer.Option("--override", help="Explicit emotion override"),
    ] = None,
    previous: Annotated[
        str,
        typer.Option("--previous", help="Emotion currently displayed"),
    ] = "neutral",
    event: Annotated[
        Optional[str],
        typer.Option("--event", "-e", help=f"One-shot event: {', '.join(GAME_EVENTS)}"),
    ] = None,
    rules_path: RulesOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the opponent's emotion for a given game state.
    """
    try:
        validate_non_negative(player, "player")
        validate_non_negative(ai, "ai")
        previous_emotion = validate_emotion(previous)
        override_emotion = validate_emotion(override) if override is not None else None
        rules = get_rules(rules_path)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if event is not None:
        try:
            emotion = emotion_for_event(event, ai, player)  # type: ignore[arg-type]
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
    else:
        signals = SessionSignals(
            player_score=player,
            ai_score=ai,
            is_opponent_turn=opponent_turn,
            explicit_emotion_override=override_emotion,
        )
        emotion = derive_emotion(signals, previous_emotion, rules)

    confidence = opponent_confidence(ai, player)
    changed = emotion != previous_emotion

    if json_out:
        print(json.dumps({
            "emotion": emotion,
            "changed": changed,
            "confidence": confidence_to_dict(confidence),
        }, indent=2))
        return

    views.print_affect(emotion, confidence, message_visible=changed)


@app.command()
def simulate(
    rounds: Annotated[int, typer.Option("--rounds", "-n", help="Number of rounds")] = 5,
    seed: Annotated[int, typer.Option("--seed", "-s", help="Random seed")] = 0,
    level: LevelOption = 5,
    privileged: Annotated[
        bool,
        typer.Option("--privileged", help="Run with skip privilege (test/debug)"),
    ] = False,
    skip_timers: Annotated[
        bool,
        typer.Option("--skip-timers", help="Skip every exercise timer (needs --privileged)"),
    ] = False,
    rules_path: RulesOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Simulate a duel against the opponent with synchronous ticks.
    """
    try:
        validate_difficulty_level(level)
        validate_non_negative(rounds, "rounds")
        rules = get_rules(rules_path)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", IllegalTransition)
        try:
            result = simulate_duel(
                playable_exercises(),
                rounds=rounds,
                seed=seed,
                difficulty_level=level,
                privileged=privileged,
                skip_timers=skip_timers,
                rules=rules,
            )
        except UnauthorizedSkip as e:
            views.print_error(f"{e} (pass --privileged)")
            raise typer.Exit(1)

    illegal = [str(w.message) for w in caught if issubclass(w.category, IllegalTransition)]

    if json_out:
        payload = duel_result_to_dict(result)
        payload["warnings"] = illegal
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for message in illegal:
        views.print_warning(message)
    views.print_duel(result)
