"""
JSON serialization for duel engine models.

Converts engine dataclasses to JSON-compatible dicts for --json output,
and validates raw CLI input before it reaches the engine.
"""

from typing import Any

from ..core.affect import OpponentConfidence
from ..core.config import MAX_DIFFICULTY_LEVEL, MIN_DIFFICULTY_LEVEL
from ..core.duel import DuelResult, DuelRound
from ..core.exercises.base import ExerciseDefinition
from ..core.models import EMOTIONS, Emotion, ExerciseTarget, GameCard, PhaseState
from ..core.scoring import ScoreAward
from ..core.session import SessionSnapshot


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_difficulty_level(level: int) -> int:
    """
    Validate a difficulty level given on the command line.

    Raises:
        ValidationError: If level is outside 1..10
    """
    if not MIN_DIFFICULTY_LEVEL <= level <= MAX_DIFFICULTY_LEVEL:
        raise ValidationError(
            f"Invalid difficulty level: {level}. "
            f"Must be between {MIN_DIFFICULTY_LEVEL} and {MAX_DIFFICULTY_LEVEL}"
        )
    return level


def validate_emotion(emotion: str) -> Emotion:
    """
    Validate an emotion name.

    Raises:
        ValidationError: If emotion is not one of EMOTIONS
    """
    if emotion not in EMOTIONS:
        raise ValidationError(f"Invalid emotion: {emotion!r}. Must be one of {', '.join(EMOTIONS)}")
    return emotion  # type: ignore


def validate_non_negative(value: int, name: str) -> int:
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def target_to_dict(target: ExerciseTarget | None) -> dict[str, Any] | None:
    if target is None:
        return None
    return {"reps": target.reps, "duration": target.duration}


def exercise_to_dict(exercise: ExerciseDefinition) -> dict[str, Any]:
    """
    Convert ExerciseDefinition to a dict (same keys as the YAML catalog).

    Args:
        exercise: Definition to convert

    Returns:
        Dict representation
    """
    return {
        "exercise_id": exercise.exercise_id,
        "display_name": exercise.display_name,
        "description": exercise.description,
        "category": exercise.category,
        "card_type": exercise.card_type,
        "base_reps": exercise.base_reps,
        "base_duration": exercise.base_duration,
    }


def card_to_dict(card: GameCard) -> dict[str, Any]:
    return {
        "card_id": card.card_id,
        "exercise_id": card.exercise.exercise_id,
        "name": card.exercise.display_name,
        "points": card.points,
        "difficulty": card.difficulty,
        "type": card.type,
        "special": card.special,
        "combo_tag": card.combo_tag,
        "card_type": card.card_type,
    }


def phase_to_dict(phase: PhaseState | None) -> dict[str, Any] | None:
    if phase is None:
        return None
    return {"phase": phase.phase, "remaining": phase.remaining, "elapsed": phase.elapsed}


def award_to_dict(award: ScoreAward | None) -> dict[str, Any] | None:
    """
    Convert ScoreAward to dict.

    total_gain is included so consumers need not re-add the steal transfer.
    """
    if award is None:
        return None
    return {
        "side": award.side,
        "base_points": award.base_points,
        "points_awarded": award.points_awarded,
        "transferred": award.transferred,
        "total_gain": award.total_gain,
        "special": award.special,
        "special_blocked": award.special_blocked,
    }


def confidence_to_dict(confidence: OpponentConfidence) -> dict[str, Any]:
    return {"label": confidence.label, "meter": confidence.meter}


def snapshot_to_dict(snapshot: SessionSnapshot) -> dict[str, Any]:
    """
    Convert SessionSnapshot to dict.

    Args:
        snapshot: Snapshot to convert

    Returns:
        Dict representation
    """
    return {
        "card": card_to_dict(snapshot.card) if snapshot.card is not None else None,
        "phase": phase_to_dict(snapshot.phase),
        "target": target_to_dict(snapshot.target),
        "remaining_seconds": snapshot.remaining_seconds,
        "progress": round(snapshot.progress, 4),
        "player_score": snapshot.player_score,
        "ai_score": snapshot.ai_score,
        "emotion": snapshot.emotion,
        "message": snapshot.message,
        "confidence": confidence_to_dict(snapshot.confidence),
        "is_opponent_turn": snapshot.is_opponent_turn,
    }


def duel_round_to_dict(duel_round: DuelRound) -> dict[str, Any]:
    return {
        "round": duel_round.number,
        "player_card": card_to_dict(duel_round.player_card),
        "target": duel_round.target,
        "ticks": duel_round.ticks,
        "skipped": duel_round.skipped,
        "player_award": award_to_dict(duel_round.player_award),
        "opponent_card": (
            card_to_dict(duel_round.opponent_card) if duel_round.opponent_card is not None else None
        ),
        "opponent_award": award_to_dict(duel_round.opponent_award),
        "player_score": duel_round.player_score,
        "ai_score": duel_round.ai_score,
        "emotion": duel_round.emotion,
    }


def duel_result_to_dict(result: DuelResult) -> dict[str, Any]:
    """
    Convert DuelResult to dict.

    Args:
        result: Finished simulation

    Returns:
        Dict representation
    """
    return {
        "player_score": result.player_score,
        "ai_score": result.ai_score,
        "winner": result.winner,
        "elapsed_ms": result.elapsed_ms,
        "emotion_changes": list(result.emotion_changes),
        "rounds": [duel_round_to_dict(r) for r in result.rounds],
    }
