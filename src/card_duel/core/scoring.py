"""
Running score accumulators and special-ability arithmetic.

Each resolved card awards its points to one side, adjusted by its special:

    double  →  points × 2
    bonus   →  points + 2
    steal   →  points, plus min(3, opponent total) moved from the opponent
    block   →  points; the scorer is shielded so the next opposing special
               has no effect (its base points still count)

Combo tags are not a scoring input.  These rules are provisional; the
amounts come from GameRules so they can be tuned without code changes.
"""

from dataclasses import dataclass, field

from .config import DEFAULT_RULES, GameRules
from .models import GameCard, Side, Special


def _other(side: Side) -> Side:
    return "opponent" if side == "player" else "player"


@dataclass(frozen=True)
class ScoreAward:
    """Outcome of resolving one card."""

    side: Side
    base_points: int
    points_awarded: int  # added to the scorer, excluding any stolen points
    transferred: int  # points moved from the other side by steal
    special: Special | None = None
    special_blocked: bool = False

    @property
    def total_gain(self) -> int:
        return self.points_awarded + self.transferred


@dataclass
class ScoreBoard:
    """
    Session-scoped running totals for player and opponent.

    Totals are pure accumulators; they never go below zero because steal
    is capped at the opponent's current total.
    """

    player_score: int = 0
    ai_score: int = 0
    player_shielded: bool = False
    opponent_shielded: bool = False
    rules: GameRules = field(default=DEFAULT_RULES)

    def score_of(self, side: Side) -> int:
        return self.player_score if side == "player" else self.ai_score

    def is_shielded(self, side: Side) -> bool:
        return self.player_shielded if side == "player" else self.opponent_shielded

    def _add(self, side: Side, delta: int) -> None:
        if side == "player":
            self.player_score += delta
        else:
            self.ai_score += delta

    def _set_shield(self, side: Side, value: bool) -> None:
        if side == "player":
            self.player_shielded = value
        else:
            self.opponent_shielded = value

    def award(self, side: Side, card: GameCard) -> ScoreAward:
        """
        Resolve *card* for *side* and update both totals.

        Args:
            side: "player" or "opponent"
            card: Card being resolved

        Returns:
            ScoreAward describing what was applied
        """
        if side not in ("player", "opponent"):
            raise ValueError(f"Invalid side: {side}")

        other = _other(side)
        points = card.points
        transferred = 0
        blocked = False

        if card.special is not None and self.is_shielded(other):
            self._set_shield(other, False)
            blocked = True
        elif card.special == "double":
            points *= self.rules.double_factor
        elif card.special == "bonus":
            points += self.rules.bonus_points
        elif card.special == "steal":
            transferred = min(self.rules.steal_points, self.score_of(other))
            self._add(other, -transferred)
        elif card.special == "block":
            self._set_shield(side, True)

        self._add(side, points + transferred)

        return ScoreAward(
            side=side,
            base_points=card.points,
            points_awarded=points,
            transferred=transferred,
            special=card.special,
            special_blocked=blocked,
        )

    @property
    def leader(self) -> Side | None:
        """Side currently ahead, None on a tie."""
        if self.player_score > self.ai_score:
            return "player"
        if self.ai_score > self.player_score:
            return "opponent"
        return None
