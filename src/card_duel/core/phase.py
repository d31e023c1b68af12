"""
Per-card phase state machine.

    waiting ──begin──▶ countdown(3) ─tick▶ countdown(2) ─tick▶ countdown(1) ─tick▶ active(0)
    active(n) ─tick▶ active(n+1) … ─▶ completed            (timed targets)
    active(0) ─complete──▶ completed                        (rep targets, utility cards)
    countdown / active ─skip(authorized)──▶ completed
    waiting / completed ─reset──▶ waiting

Cards that need no physical execution (utility, power) skip the countdown
and wait in active for external resolution through complete().

The machine is driven by one external 1-second tick source and never
blocks.  Requests that do not fit the current state are reported as
IllegalTransition warnings and leave the state untouched; ticks after
completion are silent no-ops.
"""

import warnings

from .config import COUNTDOWN_START
from .errors import IllegalTransition, UnauthorizedSkip
from .models import ExerciseTarget, PhaseState


class ExercisePhaseMachine:
    """
    Countdown → active → completed lifecycle for one drawn card.

    One instance per card.  A new card needs a new machine; reset() only
    restarts the same card against the same target.
    """

    def __init__(
        self,
        target: ExerciseTarget | None,
        requires_execution: bool = True,
    ) -> None:
        """
        Args:
            target: Scaled target; None only for cards without execution
            requires_execution: False for utility/power cards (no countdown)

        Raises:
            ValueError: If an execution card has no target
        """
        if requires_execution and target is None:
            raise ValueError("Cards that require execution need an ExerciseTarget")
        self.target = target
        self.requires_execution = requires_execution
        self._state = PhaseState.waiting()

    # ------------------------------------------------------------------
    # Read-only views for presentation
    # ------------------------------------------------------------------

    @property
    def state(self) -> PhaseState:
        return self._state

    @property
    def phase(self) -> str:
        return self._state.phase

    @property
    def is_completed(self) -> bool:
        return self._state.phase == "completed"

    @property
    def is_timed(self) -> bool:
        return self.target is not None and self.target.is_timed

    @property
    def _duration(self) -> int | None:
        return self.target.duration if self.target is not None else None

    @property
    def needs_manual_completion(self) -> bool:
        """True when only complete() can finish the active phase."""
        return not self.is_timed

    @property
    def remaining_seconds(self) -> int | None:
        """Seconds left on a timed active card (full duration before that), else None."""
        duration = self._duration
        if duration is None:
            return None
        if self._state.phase == "completed":
            return 0
        return max(0, duration - self._state.elapsed)

    @property
    def progress(self) -> float:
        """Fraction of the card done, for progress bars (0.0–1.0)."""
        if self._state.phase == "completed":
            return 1.0
        duration = self._duration
        if self._state.phase != "active" or duration is None:
            return 0.0
        return min(1.0, self._state.elapsed / duration)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _illegal(self, operation: str, reason: str) -> bool:
        warnings.warn(
            IllegalTransition(f"{operation}() ignored in {self._state}: {reason}"),
            stacklevel=3,
        )
        return False

    def begin(self) -> bool:
        """Start the card: countdown for exercise/warmup cards, active otherwise."""
        if self._state.phase != "waiting":
            return self._illegal("begin", "card already started")
        if self.requires_execution:
            self._state = PhaseState.countdown(COUNTDOWN_START)
        else:
            self._state = PhaseState.active(0)
        return True

    def tick(self) -> bool:
        """
        Advance one second.

        Returns:
            True if the state changed
        """
        phase = self._state.phase

        if phase == "completed":
            return False

        if phase == "waiting":
            return self._illegal("tick", "card has not begun")

        if phase == "countdown":
            remaining = self._state.remaining
            if remaining <= 1:
                self._state = PhaseState.active(0)
            else:
                self._state = PhaseState.countdown(remaining - 1)
            return True

        # active
        duration = self._duration
        if duration is None:
            return self._illegal("tick", "rep-based card waits for complete()")

        elapsed = self._state.elapsed + 1
        if elapsed >= duration:
            self._state = PhaseState.completed()
        else:
            self._state = PhaseState.active(elapsed)
        return True

    def complete(self) -> bool:
        """Player/UI reports the card done (rep targets and utility cards only)."""
        if self._state.phase != "active":
            return self._illegal("complete", "card is not active")
        if self.is_timed:
            return self._illegal("complete", "timed card completes on its own")
        self._state = PhaseState.completed()
        return True

    def skip(self, authorized: bool) -> bool:
        """
        Force completion, bypassing remaining time.

        Args:
            authorized: Privilege flag from the authorization collaborator

        Raises:
            UnauthorizedSkip: If authorized is not True; state is unchanged
        """
        if authorized is not True:
            raise UnauthorizedSkip(f"skip() requires privilege (state {self._state})")
        if self._state.phase not in ("countdown", "active"):
            return self._illegal("skip", "only countdown or active cards can be skipped")
        self._state = PhaseState.completed()
        return True

    def reset(self) -> bool:
        """Return to waiting with the same target (from waiting or completed only)."""
        if self._state.phase not in ("waiting", "completed"):
            return self._illegal("reset", "card is in progress")
        self._state = PhaseState.waiting()
        return True
