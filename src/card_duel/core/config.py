"""
Configuration constants for the card-duel session engine.

All adjustable parameters are centralized here for easy tuning.
User-tunable game rules are also collected into GameRules, which
engine/config_loader.py can build from YAML overrides.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# DIFFICULTY SCALING
# =============================================================================

BASELINE_DIFFICULTY_LEVEL: Final[int] = 5  # Level at which targets are unscaled
MIN_DIFFICULTY_LEVEL: Final[int] = 1
MAX_DIFFICULTY_LEVEL: Final[int] = 10

MIN_TARGET_REPS: Final[int] = 3  # Floor on any scaled rep target
MIN_TARGET_DURATION_SECONDS: Final[int] = 10  # Floor on any scaled duration
DEFAULT_BASE_DURATION_SECONDS: Final[int] = 30  # Used when a definition has no base duration

# =============================================================================
# PHASE MACHINE
# =============================================================================

COUNTDOWN_START: Final[int] = 3  # Countdown visits 3, 2, 1 then goes active
TICK_SECONDS: Final[int] = 1  # Cadence of the external tick source

# Card kinds that require the player to physically perform the exercise.
EXECUTION_CARD_TYPES: Final[tuple[str, ...]] = ("exercise", "warmup")

# =============================================================================
# OPPONENT AFFECT
# =============================================================================

AFFECT_VISIBILITY_MS: Final[int] = 3000  # Speech-bubble window after an emotion change
SCORE_LEAD_THRESHOLD: Final[int] = 2  # Lead strictly above this → confident/determined
TIE_MARGIN: Final[int] = 1  # |diff| at or below this → focused

CONFIDENCE_METER_CENTER: Final[int] = 50
CONFIDENCE_METER_STEP: Final[int] = 10  # Meter points per point of score advantage

# =============================================================================
# SPECIAL ABILITIES
# =============================================================================

DOUBLE_FACTOR: Final[int] = 2  # "double" multiplies the card's own points
BONUS_POINTS: Final[int] = 2  # "bonus" adds a flat amount
STEAL_POINTS: Final[int] = 3  # "steal" transfers up to this much from the opponent

# =============================================================================
# DECK BUILDING
# =============================================================================

CATEGORY_DIFFICULTY: Final[dict[str, int]] = {
    "cardio": 3,
    "strength": 4,
    "flexibility": 2,
    "balance": 2,
    "endurance": 4,
    "mixed": 3,
    "warmup": 1,
    "utility": 1,
}
DEFAULT_CATEGORY_DIFFICULTY: Final[int] = 3

CATEGORY_CARD_TYPE: Final[dict[str, str]] = {
    "cardio": "cardio",
    "strength": "strength",
    "flexibility": "flexibility",
    "balance": "flexibility",
    "endurance": "cardio",
    "mixed": "mixed",
    "warmup": "warmup",
    "utility": "utility",
}

CATEGORY_COMBO_TAG: Final[dict[str, str]] = {
    "cardio": "energy",
    "strength": "power",
    "flexibility": "flow",
    "balance": "stability",
}
DEFAULT_COMBO_TAG: Final[str] = "basic"

REPS_POINT_UNIT: Final[int] = 10  # base_reps / 10 → intensity multiplier
DURATION_POINT_UNIT: Final[int] = 30  # base_duration / 30 → duration multiplier

COPIES_PER_EXERCISE: Final[int] = 3
SPECIAL_CHANCE: Final[float] = 0.15
POWER_CARD_FRACTION: Final[float] = 0.10
MIN_POWER_CARDS: Final[int] = 2
POWER_CARD_POINTS: Final[tuple[int, int]] = (4, 6)  # inclusive range
POWER_CARD_DIFFICULTY: Final[tuple[int, int]] = (3, 5)  # inclusive range
HAND_SIZE: Final[int] = 3

# =============================================================================
# OPPONENT STRATEGY
# =============================================================================

OPPONENT_DESPERATE_DEFICIT: Final[int] = 5  # Player lead above this → play specials/combos
OPPONENT_COMFORT_LEAD: Final[int] = 3  # Opponent lead above this → play weakest card
OPPONENT_GOOD_CARD_POINTS: Final[int] = 4

# =============================================================================
# WORKOUT ESTIMATE
# =============================================================================

SECONDS_PER_REP: Final[int] = 3  # ~2 s per rep + 1 s rest
TRANSITION_SECONDS: Final[int] = 10  # Between consecutive cards


@dataclass(frozen=True)
class GameRules:
    """Game rules a user may tune through ~/.card-duel/game.yaml."""

    double_factor: int = DOUBLE_FACTOR
    bonus_points: int = BONUS_POINTS
    steal_points: int = STEAL_POINTS
    affect_visibility_ms: int = AFFECT_VISIBILITY_MS
    score_lead_threshold: int = SCORE_LEAD_THRESHOLD
    tie_margin: int = TIE_MARGIN

    def __post_init__(self) -> None:
        if self.double_factor < 1:
            raise ValueError("double_factor must be at least 1")
        if self.bonus_points < 0:
            raise ValueError("bonus_points must be non-negative")
        if self.steal_points < 0:
            raise ValueError("steal_points must be non-negative")
        if self.affect_visibility_ms <= 0:
            raise ValueError("affect_visibility_ms must be positive")
        if self.score_lead_threshold < 0 or self.tie_margin < 0:
            raise ValueError("affect thresholds must be non-negative")


DEFAULT_RULES: Final[GameRules] = GameRules()


def clamp_difficulty_level(level: int) -> int:
    """
    Clamp a player difficulty level into the supported 1..10 range.

    Args:
        level: Stored player difficulty level

    Returns:
        Level clamped to [MIN_DIFFICULTY_LEVEL, MAX_DIFFICULTY_LEVEL]
    """
    return max(MIN_DIFFICULTY_LEVEL, min(MAX_DIFFICULTY_LEVEL, int(level)))
