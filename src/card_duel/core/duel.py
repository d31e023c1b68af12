"""
Deterministic duel simulation.

Plays a whole duel against the simulated opponent with synchronous
ticks and a ManualClock, so the full engine (scaling, phases, affect,
scoring) can be exercised without wall-clock waits.  The simulated
player always plays the highest-points card in hand and finishes rep
targets at ~3 s per rep.
"""

import random
from dataclasses import dataclass, field
from collections.abc import Sequence

from .clock import ManualClock
from .config import DEFAULT_RULES, SECONDS_PER_REP, GameRules
from .deck import build_deck, choose_opponent_card, refill_hand
from .exercises.base import ExerciseDefinition
from .models import Emotion, ExerciseTarget, GameCard
from .scoring import ScoreAward
from .session import SessionCoordinator

@dataclass(frozen=True)
class DuelRound:
    """One player turn followed by one opponent turn."""

    number: int
    player_card: GameCard
    target: str  # "12 reps", "45s" or "—" for cards without execution
    ticks: int  # ticks delivered while the card was in play
    skipped: bool
    player_award: ScoreAward
    opponent_card: GameCard | None
    opponent_award: ScoreAward | None
    player_score: int
    ai_score: int
    emotion: Emotion


@dataclass
class DuelResult:
    rounds: list[DuelRound] = field(default_factory=list)
    player_score: int = 0
    ai_score: int = 0
    emotion_changes: list[Emotion] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def winner(self) -> str:
        if self.player_score > self.ai_score:
            return "player"
        if self.ai_score > self.player_score:
            return "opponent"
        return "tie"


def _play_card(
    session: SessionCoordinator,
    clock: ManualClock,
    card: GameCard,
    skip: bool,
) -> tuple[ExerciseTarget | None, int, bool]:
    """Run *card* to completion; return (target, ticks delivered, skipped)."""
    target = session.draw_card(card)
    session.begin_card()

    if skip and card.requires_execution:
        session.skip_card(authorized=True)
        return target, 0, True

    machine = session.machine
    if machine is None:
        return target, 0, False
    ticks = 0
    while not machine.is_completed:
        if machine.phase == "active" and machine.needs_manual_completion:
            reps = target.reps if target is not None and target.reps is not None else 0
            clock.advance(reps * SECONDS_PER_REP * 1000.0)
            session.complete_card()
            break
        if not session.tick():
            break
        clock.advance_ticks(1)
        ticks += 1
    return target, ticks, False


def simulate_duel(
    exercises: Sequence[ExerciseDefinition],
    *,
    rounds: int = 5,
    seed: int = 0,
    difficulty_level: int = 5,
    privileged: bool = False,
    skip_timers: bool = False,
    rules: GameRules = DEFAULT_RULES,
) -> DuelResult:
    """
    Simulate a duel.

    Args:
        exercises: Definitions to build the deck from
        rounds: Maximum number of rounds (stops early if the deck runs out)
        seed: Seed for deck shuffling and opponent choices
        difficulty_level: Player difficulty level
        privileged: Authorization flag handed to skip_card()
        skip_timers: Skip every exercise card (requires privileged)
        rules: Scoring and affect tunables

    Returns:
        DuelResult with per-round details

    Raises:
        UnauthorizedSkip: If skip_timers is requested without privileged
    """
    rng = random.Random(seed)
    clock = ManualClock()
    result = DuelResult()
    session = SessionCoordinator(
        difficulty_level,
        rules=rules,
        clock=clock,
        on_emotion_change=result.emotion_changes.append,
    )
    if skip_timers and not privileged:
        # Surface the denial before any card is played.
        session.skip_card(authorized=privileged)

    deck = build_deck(exercises, rng)
    session.trigger_event("game_start")

    player_hand: list[GameCard] = []
    ai_hand: list[GameCard] = []

    for number in range(1, rounds + 1):
        player_hand = refill_hand(player_hand, deck)
        ai_hand = refill_hand(ai_hand, deck)
        if not player_hand:
            break

        # Player turn
        session.is_opponent_turn = False
        card = max(player_hand, key=lambda c: c.points)
        player_hand.remove(card)
        target, ticks, skipped = _play_card(session, clock, card, skip_timers)
        player_award = session.submit_card()
        if player_award is None:
            # The card never completed; submit_card() already warned.
            break
        session.trigger_event("player_good_exercise")

        # Opponent turn
        opponent_card: GameCard | None = None
        opponent_award: ScoreAward | None = None
        if ai_hand:
            session.is_opponent_turn = True
            session.refresh_affect()
            clock.advance_ticks(1)
            opponent_card = choose_opponent_card(ai_hand, session.player_score, session.ai_score, rng)
            ai_hand.remove(opponent_card)
            opponent_award = session.resolve_opponent_card(opponent_card)
            session.is_opponent_turn = False
            session.trigger_event("ai_good_exercise")

        clock.advance_ticks(1)
        session.refresh_affect()

        result.rounds.append(
            DuelRound(
                number=number,
                player_card=card,
                target=str(target) if target is not None else "—",
                ticks=ticks,
                skipped=skipped,
                player_award=player_award,
                opponent_card=opponent_card,
                opponent_award=opponent_award,
                player_score=session.player_score,
                ai_score=session.ai_score,
                emotion=session.affect.displayed_emotion,
            )
        )

    if session.player_score == session.ai_score:
        session.trigger_event("tie")

    result.player_score = session.player_score
    result.ai_score = session.ai_score
    result.elapsed_ms = clock()
    return result
