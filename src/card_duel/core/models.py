"""
Data models for card-duel.

Value objects shared by the scaler, the phase machine, the affect model
and the session coordinator.  Enumerations are plain Literal strings,
validated in __post_init__.
"""

from dataclasses import dataclass
from typing import Literal

from .config import (
    COUNTDOWN_START,
    EXECUTION_CARD_TYPES,
    MIN_TARGET_DURATION_SECONDS,
    MIN_TARGET_REPS,
)
from .exercises.base import CardType, ExerciseDefinition

CardFamily = Literal["cardio", "strength", "flexibility", "mixed", "warmup", "utility"]
Special = Literal["double", "block", "steal", "bonus"]
Phase = Literal["waiting", "countdown", "active", "completed"]
Emotion = Literal[
    "neutral",
    "confident",
    "determined",
    "focused",
    "celebratory",
    "frustrated",
    "thinking",
    "surprised",
]
GameEvent = Literal["player_good_exercise", "ai_good_exercise", "tie", "game_start"]
Side = Literal["player", "opponent"]

CARD_FAMILIES: tuple[str, ...] = ("cardio", "strength", "flexibility", "mixed", "warmup", "utility")
SPECIALS: tuple[str, ...] = ("double", "block", "steal", "bonus")
EMOTIONS: tuple[str, ...] = (
    "neutral",
    "confident",
    "determined",
    "focused",
    "celebratory",
    "frustrated",
    "thinking",
    "surprised",
)
GAME_EVENTS: tuple[str, ...] = ("player_good_exercise", "ai_good_exercise", "tie", "game_start")


@dataclass(frozen=True)
class GameCard:
    """
    A drawn, playable card wrapping an exercise definition.

    Created when a card is drawn and discarded when resolved; never mutated.
    ``combo_tag`` is a display/streak hint only.
    """

    card_id: str
    exercise: ExerciseDefinition
    points: int
    difficulty: int
    type: CardFamily
    special: Special | None = None
    combo_tag: str | None = None
    card_type: CardType = "exercise"

    def __post_init__(self) -> None:
        """Validate card data."""
        if self.points < 0:
            raise ValueError("points must be non-negative")
        if not 1 <= self.difficulty <= 5:
            raise ValueError(f"difficulty must be in 1..5, got {self.difficulty}")
        if self.type not in CARD_FAMILIES:
            raise ValueError(f"Invalid card type: {self.type}")
        if self.special is not None and self.special not in SPECIALS:
            raise ValueError(f"Invalid special: {self.special}")

    @property
    def requires_execution(self) -> bool:
        """True if the player must physically perform this card."""
        return self.card_type in EXECUTION_CARD_TYPES


@dataclass(frozen=True)
class ExerciseTarget:
    """
    Player-specific target for one card: either reps or a duration.

    Computed once per card per session and cached for the card's lifetime.
    """

    reps: int | None = None
    duration: int | None = None  # seconds

    def __post_init__(self) -> None:
        if (self.reps is None) == (self.duration is None):
            raise ValueError("ExerciseTarget needs exactly one of reps or duration")
        if self.reps is not None and self.reps < MIN_TARGET_REPS:
            raise ValueError(f"ExerciseTarget.reps must be ≥ {MIN_TARGET_REPS}")
        if self.duration is not None and self.duration < MIN_TARGET_DURATION_SECONDS:
            raise ValueError(
                f"ExerciseTarget.duration must be ≥ {MIN_TARGET_DURATION_SECONDS}"
            )

    @property
    def is_timed(self) -> bool:
        return self.duration is not None

    def __str__(self) -> str:
        if self.reps is not None:
            return f"{self.reps} reps"
        return f"{self.duration}s"


@dataclass(frozen=True)
class PhaseState:
    """
    Lifecycle stage of one card.

    ``remaining`` is meaningful only in countdown, ``elapsed`` only in active.
    Use the constructors below rather than building states by hand.
    """

    phase: Phase
    remaining: int = 0
    elapsed: int = 0

    def __post_init__(self) -> None:
        if self.phase not in ("waiting", "countdown", "active", "completed"):
            raise ValueError(f"Invalid phase: {self.phase}")
        if self.phase == "countdown" and not 1 <= self.remaining <= COUNTDOWN_START:
            raise ValueError(f"countdown remaining must be in 1..{COUNTDOWN_START}")
        if self.elapsed < 0:
            raise ValueError("elapsed must be non-negative")

    @classmethod
    def waiting(cls) -> "PhaseState":
        return cls("waiting")

    @classmethod
    def countdown(cls, remaining: int) -> "PhaseState":
        return cls("countdown", remaining=remaining)

    @classmethod
    def active(cls, elapsed: int = 0) -> "PhaseState":
        return cls("active", elapsed=elapsed)

    @classmethod
    def completed(cls) -> "PhaseState":
        return cls("completed")

    def __str__(self) -> str:
        if self.phase == "countdown":
            return f"Countdown({self.remaining})"
        if self.phase == "active":
            return f"Active({self.elapsed})"
        return self.phase.capitalize()


@dataclass(frozen=True)
class AffectState:
    """Opponent's displayed emotion and the end of its speech-bubble window (ms)."""

    emotion: Emotion = "neutral"
    visible_until: float | None = None

    def __post_init__(self) -> None:
        if self.emotion not in EMOTIONS:
            raise ValueError(f"Invalid emotion: {self.emotion}")

    def is_visible(self, now_ms: float) -> bool:
        """True while the speech-bubble window is open at *now_ms*."""
        return self.visible_until is not None and now_ms < self.visible_until


@dataclass(frozen=True)
class SessionSignals:
    """Inputs to affect derivation, supplied fresh on every evaluation."""

    player_score: int
    ai_score: int
    is_opponent_turn: bool = False
    deck_type: str = "mixed"
    explicit_emotion_override: Emotion | None = None

    def __post_init__(self) -> None:
        if (
            self.explicit_emotion_override is not None
            and self.explicit_emotion_override not in EMOTIONS
        ):
            raise ValueError(f"Invalid emotion override: {self.explicit_emotion_override}")

    @property
    def score_advantage(self) -> int:
        """Opponent score minus player score."""
        return self.ai_score - self.player_score
