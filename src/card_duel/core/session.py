"""
Session coordinator.

Composes the difficulty scaler, one phase machine per drawn card, the
opponent affect model and the scoreboard into the contract consumed by
presentation:

    draw_card → begin_card → tick… / complete_card / skip_card → submit_card
                                   reset_card (redo before submitting)

The coordinator is single-threaded and not reentrant: the caller must
serialize timer callbacks with user input.  Sessions share no state.
"""

import warnings
from dataclasses import dataclass
from typing import Callable

from .affect import OpponentAffectModel, OpponentConfidence, opponent_confidence
from .clock import Clock
from .config import DEFAULT_RULES, GameRules, clamp_difficulty_level
from .errors import IllegalTransition, UnauthorizedSkip
from .models import (
    Emotion,
    ExerciseTarget,
    GameCard,
    GameEvent,
    PhaseState,
    SessionSignals,
)
from .phase import ExercisePhaseMachine
from .scaling import scale_exercise
from .scoring import ScoreAward, ScoreBoard


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything presentation needs to render one frame."""

    card: GameCard | None
    phase: PhaseState | None
    target: ExerciseTarget | None
    remaining_seconds: int | None
    progress: float
    player_score: int
    ai_score: int
    emotion: Emotion
    message: str | None
    confidence: OpponentConfidence
    is_opponent_turn: bool


class SessionCoordinator:
    """
    One duel session.

    Targets are scaled once per (card id, exercise id) pair with the
    difficulty level in force at draw time and cached for the rest of the
    session.
    """

    def __init__(
        self,
        difficulty_level: int = 5,
        *,
        deck_type: str = "mixed",
        rules: GameRules = DEFAULT_RULES,
        clock: Clock | None = None,
        on_emotion_change: Callable[[Emotion], None] | None = None,
        initial_emotion: Emotion = "neutral",
        strict_definitions: bool = False,
    ) -> None:
        """
        Args:
            difficulty_level: Player level, clamped to 1..10
            deck_type: Deck theme passed through to affect signals
            rules: Scoring and affect tunables
            clock: Millisecond clock for affect windows (monotonic by default)
            on_emotion_change: Observer notified once per displayed change
            initial_emotion: Emotion displayed before the first refresh
            strict_definitions: Reject dual-/un-defined exercises at draw time
        """
        self.difficulty_level = clamp_difficulty_level(difficulty_level)
        self.deck_type = deck_type
        self.rules = rules
        self.strict_definitions = strict_definitions
        self.affect = OpponentAffectModel(
            initial_emotion,
            on_emotion_change=on_emotion_change,
            clock=clock,
            rules=rules,
        )
        self.scoreboard = ScoreBoard(rules=rules)
        self.is_opponent_turn = False
        self.awards: list[ScoreAward] = []

        self._targets: dict[tuple[str, str], ExerciseTarget | None] = {}
        self._card: GameCard | None = None
        self._machine: ExercisePhaseMachine | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def current_card(self) -> GameCard | None:
        return self._card

    @property
    def machine(self) -> ExercisePhaseMachine | None:
        return self._machine

    @property
    def phase_state(self) -> PhaseState | None:
        return self._machine.state if self._machine is not None else None

    @property
    def target(self) -> ExerciseTarget | None:
        return self._machine.target if self._machine is not None else None

    @property
    def player_score(self) -> int:
        return self.scoreboard.player_score

    @property
    def ai_score(self) -> int:
        return self.scoreboard.ai_score

    def set_difficulty_level(self, level: int) -> None:
        """Change the level for cards drawn from now on; cached targets keep theirs."""
        self.difficulty_level = clamp_difficulty_level(level)

    # ------------------------------------------------------------------
    # Card lifecycle
    # ------------------------------------------------------------------

    def draw_card(self, card: GameCard) -> ExerciseTarget | None:
        """
        Make *card* the current card with a fresh phase machine.

        Any previous unsubmitted card is dismissed without scoring.

        Returns:
            The cached target, or None for cards without physical execution

        Raises:
            InvalidExerciseDefinition: With strict_definitions and a
                dual-/un-defined exercise
        """
        key = (card.card_id, card.exercise.exercise_id)
        if key in self._targets:
            target = self._targets[key]
        else:
            target = None
            if card.requires_execution:
                target = scale_exercise(
                    card.exercise,
                    self.difficulty_level,
                    strict=self.strict_definitions,
                )
            self._targets[key] = target

        self._card = card
        self._machine = ExercisePhaseMachine(target, requires_execution=card.requires_execution)
        return target

    def _require_machine(self, operation: str) -> ExercisePhaseMachine | None:
        if self._machine is None:
            warnings.warn(
                IllegalTransition(f"{operation}() ignored: no card drawn"),
                stacklevel=3,
            )
        return self._machine

    def begin_card(self) -> bool:
        machine = self._require_machine("begin_card")
        return machine.begin() if machine is not None else False

    def tick(self) -> bool:
        """Deliver one 1-second tick to the current card."""
        machine = self._require_machine("tick")
        return machine.tick() if machine is not None else False

    def complete_card(self) -> bool:
        machine = self._require_machine("complete_card")
        return machine.complete() if machine is not None else False

    def skip_card(self, authorized: bool) -> bool:
        """
        Privileged skip of the current card.

        Raises:
            UnauthorizedSkip: If not authorized (checked before anything else)
        """
        if authorized is not True:
            raise UnauthorizedSkip("skip_card() requires privilege")
        machine = self._require_machine("skip_card")
        return machine.skip(authorized) if machine is not None else False

    def reset_card(self) -> bool:
        machine = self._require_machine("reset_card")
        return machine.reset() if machine is not None else False

    def submit_card(self) -> ScoreAward | None:
        """
        Score the completed current card for the player and dismiss it.

        Returns:
            The award, or None (with an IllegalTransition warning) if there
            is no completed card
        """
        machine = self._require_machine("submit_card")
        if machine is None or self._card is None:
            return None
        if not machine.is_completed:
            warnings.warn(
                IllegalTransition(f"submit_card() ignored in {machine.state}: card not completed"),
                stacklevel=2,
            )
            return None

        award = self.scoreboard.award("player", self._card)
        self.awards.append(award)
        self.dismiss_card()
        return award

    def dismiss_card(self) -> bool:
        """Drop the current card and its phase state without scoring."""
        if self._machine is None:
            return False
        self._card = None
        self._machine = None
        return True

    def resolve_opponent_card(self, card: GameCard) -> ScoreAward:
        """Score a card played by the simulated opponent."""
        award = self.scoreboard.award("opponent", card)
        self.awards.append(award)
        return award

    # ------------------------------------------------------------------
    # Opponent affect
    # ------------------------------------------------------------------

    def signals(
        self,
        is_opponent_turn: bool | None = None,
        explicit_emotion_override: Emotion | None = None,
    ) -> SessionSignals:
        """Build SessionSignals from the session's own totals and turn flag."""
        return SessionSignals(
            player_score=self.player_score,
            ai_score=self.ai_score,
            is_opponent_turn=self.is_opponent_turn if is_opponent_turn is None else is_opponent_turn,
            deck_type=self.deck_type,
            explicit_emotion_override=explicit_emotion_override,
        )

    def refresh_affect(self, signals: SessionSignals | None = None) -> bool:
        """
        Re-derive the opponent emotion (continuous channel).

        Args:
            signals: Externally supplied signals; defaults to self.signals()

        Returns:
            True if the displayed emotion changed
        """
        return self.affect.refresh(signals if signals is not None else self.signals())

    def trigger_event(self, event: GameEvent) -> bool:
        """Apply a one-shot event reaction using the current totals."""
        return self.affect.apply_event(event, self.ai_score, self.player_score)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def snapshot(self, now_ms: float | None = None) -> SessionSnapshot:
        machine = self._machine
        return SessionSnapshot(
            card=self._card,
            phase=machine.state if machine is not None else None,
            target=machine.target if machine is not None else None,
            remaining_seconds=machine.remaining_seconds if machine is not None else None,
            progress=machine.progress if machine is not None else 0.0,
            player_score=self.player_score,
            ai_score=self.ai_score,
            emotion=self.affect.displayed_emotion,
            message=self.affect.current_message(now_ms),
            confidence=opponent_confidence(self.ai_score, self.player_score),
            is_opponent_turn=self.is_opponent_turn,
        )
