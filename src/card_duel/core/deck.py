"""
Deck building and opponent card strategy.

Cards are derived from exercise definitions:

    difficulty = category difficulty (cardio 3, strength 4, flexibility 2, …)
    points     = round(difficulty × max(base_reps / 10, base_duration / 30))

(a missing base value counts as 1).  Each exercise contributes three
copies, each with a 15 % chance of a random special ability, and about
10 % of the deck (at least two cards) are power cards carrying a special.

All randomness goes through a caller-supplied random.Random so a seed
reproduces the same deck and the same opponent choices.
"""

import math
import random
from collections.abc import Sequence

from .config import (
    CATEGORY_CARD_TYPE,
    CATEGORY_COMBO_TAG,
    CATEGORY_DIFFICULTY,
    COPIES_PER_EXERCISE,
    DEFAULT_CATEGORY_DIFFICULTY,
    DEFAULT_COMBO_TAG,
    DURATION_POINT_UNIT,
    HAND_SIZE,
    MIN_POWER_CARDS,
    OPPONENT_COMFORT_LEAD,
    OPPONENT_DESPERATE_DEFICIT,
    OPPONENT_GOOD_CARD_POINTS,
    POWER_CARD_DIFFICULTY,
    POWER_CARD_FRACTION,
    POWER_CARD_POINTS,
    REPS_POINT_UNIT,
    SPECIAL_CHANCE,
)
from .exercises.base import ExerciseDefinition
from .models import SPECIALS, GameCard, Special

POWER_EXERCISES: tuple[tuple[ExerciseDefinition, Special], ...] = (
    (
        ExerciseDefinition(
            exercise_id="power_boost",
            display_name="Power Boost",
            description="Amplify your move",
            category="mixed",
            card_type="power",
        ),
        "double",
    ),
    (
        ExerciseDefinition(
            exercise_id="shield_block",
            display_name="Shield Block",
            description="Defend against the next attack",
            category="mixed",
            card_type="power",
        ),
        "block",
    ),
    (
        ExerciseDefinition(
            exercise_id="energy_steal",
            display_name="Energy Steal",
            description="Take points from your opponent",
            category="mixed",
            card_type="power",
        ),
        "steal",
    ),
    (
        ExerciseDefinition(
            exercise_id="bonus_round",
            display_name="Bonus Round",
            description="Extra points this turn",
            category="mixed",
            card_type="power",
        ),
        "bonus",
    ),
)


def category_difficulty(category: str) -> int:
    """Card difficulty (1..5) for an exercise category."""
    return CATEGORY_DIFFICULTY.get(category, DEFAULT_CATEGORY_DIFFICULTY)


def card_points(exercise: ExerciseDefinition) -> int:
    """
    Points a card for *exercise* is worth.

    Example: push_ups (strength, base_reps=10) → 4 × max(10/10, 1) = 4
             plank_hold (strength, base_duration=45) → round(4 × 1.5) = 6
    """
    difficulty = category_difficulty(exercise.category)
    intensity = exercise.base_reps / REPS_POINT_UNIT if exercise.base_reps else 1.0
    duration = exercise.base_duration / DURATION_POINT_UNIT if exercise.base_duration else 1.0
    return int(math.floor(difficulty * max(intensity, duration) + 0.5))


def make_card(
    exercise: ExerciseDefinition,
    card_id: str,
    special: Special | None = None,
) -> GameCard:
    """Build the GameCard for *exercise* with category-derived metadata."""
    return GameCard(
        card_id=card_id,
        exercise=exercise,
        points=card_points(exercise),
        difficulty=category_difficulty(exercise.category),
        type=CATEGORY_CARD_TYPE.get(exercise.category, "mixed"),  # type: ignore[arg-type]
        special=special,
        combo_tag=CATEGORY_COMBO_TAG.get(exercise.category, DEFAULT_COMBO_TAG),
        card_type=exercise.card_type,
    )


class Deck:
    """Draw pile.  Cards are drawn from the front."""

    def __init__(self, cards: Sequence[GameCard]) -> None:
        self._cards: list[GameCard] = list(cards)

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> tuple[GameCard, ...]:
        return tuple(self._cards)

    def draw(self) -> GameCard | None:
        """Remove and return the top card, or None if the deck is empty."""
        if not self._cards:
            return None
        return self._cards.pop(0)

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self._cards)


def build_deck(
    exercises: Sequence[ExerciseDefinition],
    rng: random.Random,
    copies: int = COPIES_PER_EXERCISE,
    special_chance: float = SPECIAL_CHANCE,
) -> Deck:
    """
    Build and shuffle a deck from exercise definitions.

    Args:
        exercises: Definitions to include
        rng: Random source (seed it for reproducible decks)
        copies: Copies per exercise
        special_chance: Probability that an exercise card carries a special

    Returns:
        Shuffled Deck
    """
    cards: list[GameCard] = []
    for exercise in exercises:
        for i in range(copies):
            special: Special | None = None
            if rng.random() < special_chance:
                special = rng.choice(SPECIALS)  # type: ignore[assignment]
            cards.append(make_card(exercise, f"{exercise.exercise_id}-{i}", special))

    power_count = max(MIN_POWER_CARDS, int(len(cards) * POWER_CARD_FRACTION))
    for i in range(power_count):
        exercise, special = POWER_EXERCISES[i % len(POWER_EXERCISES)]
        cards.append(
            GameCard(
                card_id=f"power-{i}",
                exercise=exercise,
                points=rng.randint(*POWER_CARD_POINTS),
                difficulty=rng.randint(*POWER_CARD_DIFFICULTY),
                type="mixed",
                special=special,
                combo_tag="power",
                card_type="power",
            )
        )

    deck = Deck(cards)
    deck.shuffle(rng)
    return deck


def refill_hand(hand: Sequence[GameCard], deck: Deck, size: int = HAND_SIZE) -> list[GameCard]:
    """Return *hand* topped up from *deck* to *size* cards (fewer if the deck runs out)."""
    new_hand = list(hand)
    while len(new_hand) < size:
        card = deck.draw()
        if card is None:
            break
        new_hand.append(card)
    return new_hand


def combo_count(card: GameCard, hand: Sequence[GameCard]) -> int:
    """Cards in *hand* sharing *card*'s combo tag (display hint only)."""
    if card.combo_tag is None:
        return 0
    return sum(1 for c in hand if c.combo_tag == card.combo_tag)


def shows_combo_hint(card: GameCard, hand: Sequence[GameCard]) -> bool:
    return combo_count(card, hand) > 1


def choose_opponent_card(
    hand: Sequence[GameCard],
    player_score: int,
    ai_score: int,
    rng: random.Random,
) -> GameCard:
    """
    Pick the opponent's card.

    - Player leads by more than 5: first special card, else first card with a
      combo partner, else the highest-points card.
    - Opponent leads by more than 3: lowest-points card.
    - Otherwise: random card worth at least 4 points, else any random card.

    Raises:
        ValueError: If hand is empty
    """
    if not hand:
        raise ValueError("Opponent hand is empty")

    deficit = player_score - ai_score

    if deficit > OPPONENT_DESPERATE_DEFICIT:
        for card in hand:
            if card.special is not None:
                return card
        for card in hand:
            if combo_count(card, hand) > 1:
                return card
        return max(hand, key=lambda c: c.points)

    if deficit < -OPPONENT_COMFORT_LEAD:
        return min(hand, key=lambda c: c.points)

    good = [c for c in hand if c.points >= OPPONENT_GOOD_CARD_POINTS]
    return rng.choice(good or list(hand))
