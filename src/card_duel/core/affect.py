"""
Opponent affect model.

Derives the opponent's displayed emotion from score and turn signals
and debounces visible reactions:

- derive_emotion() is the continuous channel, evaluated on every
  signal change (first match wins):
    1. explicit override that differs from the displayed emotion
    2. opponent's turn                 → thinking
    3. ai − player  > lead threshold   → confident
    4. player − ai  > lead threshold   → determined
    5. |ai − player| ≤ tie margin      → focused
    6. otherwise                       → neutral
- emotion_for_event() is the one-shot event channel.

OpponentAffectModel.update_displayed() applies either channel.  Only an
actual change opens a new speech-bubble window and notifies the
observer; the two channels are not reconciled, last write wins.
"""

from dataclasses import dataclass
from typing import Callable

from .clock import Clock, monotonic_ms
from .config import (
    CONFIDENCE_METER_CENTER,
    CONFIDENCE_METER_STEP,
    DEFAULT_RULES,
    GameRules,
)
from .models import EMOTIONS, GAME_EVENTS, AffectState, Emotion, GameEvent, SessionSignals

# Expression and speech-bubble line shown while the window is open.
EMOTION_DISPLAY: dict[str, tuple[str, str]] = {
    "neutral": ("😐", "Ready to play!"),
    "confident": ("😏", "I've got this!"),
    "determined": ("😤", "Time to step up!"),
    "focused": ("🤔", "Choosing my move..."),
    "celebratory": ("🎉", "Excellent move!"),
    "frustrated": ("😠", "Nice one..."),
    "thinking": ("🧠", "Let me think..."),
    "surprised": ("😲", "Didn't see that coming!"),
}


def derive_emotion(
    signals: SessionSignals,
    previous_emotion: Emotion,
    rules: GameRules = DEFAULT_RULES,
) -> Emotion:
    """
    Continuous emotion derivation from live game state.

    An override equal to the previous emotion does not short-circuit;
    derivation continues with the score rules.

    Args:
        signals: Current scores, turn and optional override
        previous_emotion: Emotion currently displayed
        rules: Lead threshold and tie margin

    Returns:
        Emotion to display
    """
    override = signals.explicit_emotion_override
    if override is not None and override != previous_emotion:
        return override

    if signals.is_opponent_turn:
        return "thinking"

    advantage = signals.ai_score - signals.player_score
    if advantage > rules.score_lead_threshold:
        return "confident"
    if -advantage > rules.score_lead_threshold:
        return "determined"
    if abs(advantage) <= rules.tie_margin:
        return "focused"
    return "neutral"


def emotion_for_event(event: GameEvent, ai_score: int, player_score: int) -> Emotion:
    """
    One-shot reaction to a discrete game event.

    Args:
        event: player_good_exercise | ai_good_exercise | tie | game_start
        ai_score: Opponent score after the event
        player_score: Player score after the event

    Returns:
        Emotion for the event

    Raises:
        ValueError: If event is unknown
    """
    if event == "player_good_exercise":
        return "frustrated" if player_score > ai_score else "surprised"
    if event == "ai_good_exercise":
        return "celebratory"
    if event == "tie":
        return "focused"
    if event == "game_start":
        return "confident"
    raise ValueError(f"Unknown game event: {event!r}. Must be one of {GAME_EVENTS}")


@dataclass(frozen=True)
class OpponentConfidence:
    """Implicit confidence shown next to the opponent."""

    label: str  # "High" | "Good" | "Moderate" | "Low"
    meter: int  # 0..100


def opponent_confidence(ai_score: int, player_score: int) -> OpponentConfidence:
    """
    Confidence label and meter from the score advantage.

    meter = clip(50 + 10 × (ai − player), 0, 100)
    """
    advantage = ai_score - player_score
    if advantage > 2:
        label = "High"
    elif advantage > 0:
        label = "Good"
    elif advantage < -2:
        label = "Low"
    else:
        label = "Moderate"
    meter = CONFIDENCE_METER_CENTER + advantage * CONFIDENCE_METER_STEP
    return OpponentConfidence(label=label, meter=max(0, min(100, meter)))


class OpponentAffectModel:
    """
    Owns the displayed emotion for one session.

    The state is replaced only through update_displayed(); refresh() and
    apply_event() are the continuous and event channels on top of it.
    """

    def __init__(
        self,
        initial_emotion: Emotion = "neutral",
        *,
        on_emotion_change: Callable[[Emotion], None] | None = None,
        clock: Clock | None = None,
        rules: GameRules = DEFAULT_RULES,
    ) -> None:
        if initial_emotion not in EMOTIONS:
            raise ValueError(f"Invalid emotion: {initial_emotion}")
        self._state = AffectState(emotion=initial_emotion)
        self.on_emotion_change = on_emotion_change
        self.clock: Clock = clock if clock is not None else monotonic_ms
        self.rules = rules

    @property
    def state(self) -> AffectState:
        return self._state

    @property
    def displayed_emotion(self) -> Emotion:
        return self._state.emotion

    def derive(self, signals: SessionSignals) -> Emotion:
        """Continuous derivation against the currently displayed emotion."""
        return derive_emotion(signals, self._state.emotion, self.rules)

    def update_displayed(self, emotion: Emotion) -> bool:
        """
        Display *emotion* if it differs from the current one.

        A change opens a fresh visibility window (replacing any open one)
        and notifies on_emotion_change exactly once.  The same emotion is
        a no-op: the window is neither reopened nor extended.

        Returns:
            True if the displayed emotion changed
        """
        if emotion not in EMOTIONS:
            raise ValueError(f"Invalid emotion: {emotion}")
        if emotion == self._state.emotion:
            return False

        now = self.clock()
        self._state = AffectState(
            emotion=emotion,
            visible_until=now + self.rules.affect_visibility_ms,
        )
        if self.on_emotion_change is not None:
            self.on_emotion_change(emotion)
        return True

    def refresh(self, signals: SessionSignals) -> bool:
        """Derive from *signals* and display the result."""
        return self.update_displayed(self.derive(signals))

    def apply_event(self, event: GameEvent, ai_score: int, player_score: int) -> bool:
        """Display the one-shot reaction for *event*."""
        return self.update_displayed(emotion_for_event(event, ai_score, player_score))

    def message_visible(self, now_ms: float | None = None) -> bool:
        """True while the speech bubble for the last change is showing."""
        now = self.clock() if now_ms is None else now_ms
        return self._state.is_visible(now)

    def current_message(self, now_ms: float | None = None) -> str | None:
        """Speech-bubble line if the window is open, else None."""
        if not self.message_visible(now_ms):
            return None
        return EMOTION_DISPLAY[self._state.emotion][1]

    @property
    def expression(self) -> str:
        return EMOTION_DISPLAY[self._state.emotion][0]
