"""
Unit tests for the core duel engine.

Covers:
- Difficulty scaling (targets, floors, fallbacks, workout estimate)
- Per-card phase machine (legal paths, rejected requests, privileged skip)
- Opponent affect (derivation order, debounce window, events, confidence)
- Scoreboard specials and deck / opponent strategy

Expected values are hand-computed from the formulas in the module docstrings.
"""

import random
import warnings

import pytest

from card_duel.core.affect import (
    OpponentAffectModel,
    derive_emotion,
    emotion_for_event,
    opponent_confidence,
)
from card_duel.core.clock import ManualClock
from card_duel.core.config import (
    AFFECT_VISIBILITY_MS,
    COUNTDOWN_START,
    EXECUTION_CARD_TYPES,
    MIN_TARGET_DURATION_SECONDS,
    MIN_TARGET_REPS,
    GameRules,
    clamp_difficulty_level,
)
from card_duel.core.deck import (
    Deck,
    build_deck,
    card_points,
    choose_opponent_card,
    combo_count,
    make_card,
    refill_hand,
    shows_combo_hint,
)
from card_duel.core.errors import IllegalTransition, InvalidExerciseDefinition, UnauthorizedSkip
from card_duel.core.exercises.base import CARD_TYPES, ExerciseDefinition, validate_exercise_definition
from card_duel.core.models import ExerciseTarget, GameCard, PhaseState, SessionSignals
from card_duel.core.phase import ExercisePhaseMachine
from card_duel.core.scaling import difficulty_multiplier, estimate_workout_minutes, scale_exercise
from card_duel.core.scoring import ScoreBoard

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _ex(
    exercise_id: str = "push_ups",
    *,
    category: str = "strength",
    reps: int | None = None,
    duration: int | None = None,
    card_type: str = "exercise",
) -> ExerciseDefinition:
    return ExerciseDefinition(
        exercise_id=exercise_id,
        display_name=exercise_id.replace("_", " ").title(),
        description="test exercise",
        category=category,
        base_reps=reps,
        base_duration=duration,
        card_type=card_type,  # type: ignore[arg-type]
    )


def _card(
    points: int = 4,
    special: str | None = None,
    *,
    card_id: str = "c-0",
    combo_tag: str | None = "strength",
    card_type: str = "exercise",
) -> GameCard:
    return GameCard(
        card_id=card_id,
        exercise=_ex(reps=10),
        points=points,
        difficulty=3,
        type="strength",
        special=special,  # type: ignore[arg-type]
        combo_tag=combo_tag,
        card_type=card_type,  # type: ignore[arg-type]
    )


def _started(target: ExerciseTarget) -> ExercisePhaseMachine:
    """Machine that has been begun and counted down to active(0)."""
    m = ExercisePhaseMachine(target)
    m.begin()
    for _ in range(COUNTDOWN_START):
        m.tick()
    return m


# ===========================================================================
# Difficulty scaling
# ===========================================================================

class TestDifficultyScaling:
    """target = max(floor, round(base × level / 5))"""

    def test_multiplier_is_level_over_five(self):
        assert difficulty_multiplier(5) == pytest.approx(1.0)
        assert difficulty_multiplier(1) == pytest.approx(0.2)
        assert difficulty_multiplier(10) == pytest.approx(2.0)

    def test_baseline_level_returns_base_reps(self):
        assert scale_exercise(_ex(reps=10), 5) == ExerciseTarget(reps=10)

    def test_reps_scale_and_round(self):
        # 12 × 1.4 = 16.8 → 17 ; 12 × 0.6 = 7.2 → 7
        assert scale_exercise(_ex(reps=12), 7).reps == 17
        assert scale_exercise(_ex(reps=12), 3).reps == 7
        assert scale_exercise(_ex(reps=10), 10).reps == 20

    def test_reps_floor_at_three(self):
        # 10 × 0.2 = 2 → floor 3
        assert scale_exercise(_ex(reps=10), 1).reps == MIN_TARGET_REPS

    def test_duration_scales_and_floors(self):
        # 45 × 2.0 = 90 ; 30 × 0.2 = 6 → floor 10 ; 60 × 0.6 = 36
        assert scale_exercise(_ex(duration=45), 10).duration == 90
        assert scale_exercise(_ex(duration=30), 1).duration == MIN_TARGET_DURATION_SECONDS
        assert scale_exercise(_ex(duration=60), 3).duration == 36

    def test_reps_take_priority_when_both_set(self):
        target = scale_exercise(_ex(reps=10, duration=60), 5)
        assert target.reps == 10
        assert target.duration is None

    def test_neither_base_defaults_to_thirty_seconds(self):
        # 30 × 1.0 = 30 ; 30 × 0.4 = 12
        assert scale_exercise(_ex(), 5).duration == 30
        assert scale_exercise(_ex(), 2).duration == 12

    def test_strict_rejects_both_and_neither(self):
        with pytest.raises(InvalidExerciseDefinition):
            scale_exercise(_ex(reps=10, duration=60), 5, strict=True)
        with pytest.raises(InvalidExerciseDefinition):
            scale_exercise(_ex(), 5, strict=True)

    def test_validate_ignores_cards_without_execution(self):
        utility = _ex("fresh_hand", category="utility", card_type="utility")
        assert validate_exercise_definition(utility) is utility

    def test_non_positive_base_values_rejected(self):
        with pytest.raises(InvalidExerciseDefinition):
            _ex(reps=0)
        with pytest.raises(InvalidExerciseDefinition):
            _ex(duration=-5)

    def test_invalid_definition_is_a_value_error(self):
        with pytest.raises(ValueError):
            _ex(card_type="boss")

    @pytest.mark.parametrize("level", range(1, 11))
    def test_floors_hold_for_every_level(self, level):
        for base in (1, 3, 7, 15):
            assert scale_exercise(_ex(reps=base), level).reps >= MIN_TARGET_REPS
            assert scale_exercise(_ex(duration=base), level).duration >= MIN_TARGET_DURATION_SECONDS

    def test_scaling_is_pure(self):
        ex = _ex(reps=12)
        assert scale_exercise(ex, 7) == scale_exercise(ex, 7)

    def test_clamp_difficulty_level(self):
        assert clamp_difficulty_level(0) == 1
        assert clamp_difficulty_level(15) == 10
        assert clamp_difficulty_level(6) == 6

    def test_target_needs_exactly_one_field(self):
        with pytest.raises(ValueError):
            ExerciseTarget()
        with pytest.raises(ValueError):
            ExerciseTarget(reps=5, duration=20)
        with pytest.raises(ValueError):
            ExerciseTarget(reps=2)

    def test_target_str(self):
        assert str(ExerciseTarget(reps=12)) == "12 reps"
        assert str(ExerciseTarget(duration=45)) == "45s"


class TestWorkoutEstimate:
    def test_mixed_cards(self):
        # push_ups 10 reps × 3 s = 30 + 10 ; plank 45 s + 10 → 95 s → 2 min
        exercises = [_ex(reps=10), _ex("plank_hold", duration=45)]
        assert estimate_workout_minutes(exercises, 5) == 2

    def test_utility_cards_only_add_transition(self):
        utility = _ex("fresh_hand", category="utility", card_type="utility")
        assert estimate_workout_minutes([utility], 5) == 1

    def test_empty(self):
        assert estimate_workout_minutes([], 5) == 0


# ===========================================================================
# Phase machine
# ===========================================================================

class TestPhaseMachine:
    def test_starts_waiting(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        assert m.state == PhaseState.waiting()

    def test_countdown_visits_three_two_one(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        assert m.begin()
        seen = [m.state.remaining]
        m.tick()
        seen.append(m.state.remaining)
        m.tick()
        seen.append(m.state.remaining)
        assert seen == [3, 2, 1]
        m.tick()
        assert m.state == PhaseState.active(0)

    def test_timed_card_completes_after_duration_ticks(self):
        m = _started(ExerciseTarget(duration=10))
        for _ in range(9):
            assert m.tick()
        assert m.state == PhaseState.active(9)
        assert m.remaining_seconds == 1
        assert m.tick()
        assert m.is_completed
        assert m.remaining_seconds == 0

    def test_progress_and_remaining(self):
        m = _started(ExerciseTarget(duration=20))
        assert m.remaining_seconds == 20
        for _ in range(5):
            m.tick()
        assert m.remaining_seconds == 15
        assert m.progress == pytest.approx(0.25)

    def test_ticks_after_completion_are_silent(self):
        m = _started(ExerciseTarget(duration=10))
        for _ in range(10):
            m.tick()
        with warnings.catch_warnings():
            warnings.simplefilter("error", IllegalTransition)
            assert m.tick() is False
        assert m.is_completed

    def test_tick_before_begin_is_illegal(self):
        m = ExercisePhaseMachine(ExerciseTarget(duration=10))
        with pytest.warns(IllegalTransition):
            assert m.tick() is False
        assert m.state == PhaseState.waiting()

    def test_rep_card_waits_for_complete(self):
        m = _started(ExerciseTarget(reps=10))
        with pytest.warns(IllegalTransition):
            assert m.tick() is False
        assert m.state == PhaseState.active(0)
        assert m.complete()
        assert m.is_completed

    def test_complete_during_countdown_is_illegal(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        m.begin()
        with pytest.warns(IllegalTransition):
            assert m.complete() is False
        assert m.state == PhaseState.countdown(3)

    def test_complete_on_timed_card_is_illegal(self):
        m = _started(ExerciseTarget(duration=30))
        with pytest.warns(IllegalTransition):
            assert m.complete() is False
        assert m.phase == "active"

    def test_begin_twice_is_illegal(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        m.begin()
        with pytest.warns(IllegalTransition):
            assert m.begin() is False

    def test_unauthorized_skip_raises_and_keeps_state(self):
        m = _started(ExerciseTarget(duration=30))
        m.tick()
        before = m.state
        with pytest.raises(UnauthorizedSkip):
            m.skip(False)
        assert m.state == before

    def test_authorization_checked_before_state(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        with pytest.raises(UnauthorizedSkip):
            m.skip(False)

    def test_truthy_non_bool_is_not_authorization(self):
        m = _started(ExerciseTarget(duration=30))
        with pytest.raises(UnauthorizedSkip):
            m.skip(1)  # type: ignore[arg-type]

    def test_authorized_skip_from_countdown_and_active(self):
        m = ExercisePhaseMachine(ExerciseTarget(duration=30))
        m.begin()
        assert m.skip(True)
        assert m.is_completed

        m2 = _started(ExerciseTarget(duration=30))
        assert m2.skip(True)
        assert m2.is_completed

    def test_skip_in_waiting_is_illegal(self):
        m = ExercisePhaseMachine(ExerciseTarget(reps=10))
        with pytest.warns(IllegalTransition):
            assert m.skip(True) is False

    def test_reset_keeps_target(self):
        target = ExerciseTarget(duration=12)
        m = _started(target)
        m.skip(True)
        assert m.reset()
        assert m.state == PhaseState.waiting()
        assert m.target is target

    def test_reset_mid_card_is_illegal(self):
        m = _started(ExerciseTarget(duration=12))
        with pytest.warns(IllegalTransition):
            assert m.reset() is False
        assert m.phase == "active"

    def test_card_without_execution_skips_countdown(self):
        m = ExercisePhaseMachine(None, requires_execution=False)
        m.begin()
        assert m.state == PhaseState.active(0)
        assert m.needs_manual_completion
        assert m.complete()

    def test_card_without_target_reports_no_timer(self):
        m = ExercisePhaseMachine(None, requires_execution=False)
        m.begin()
        assert m.remaining_seconds is None
        assert m.progress == 0.0
        with pytest.warns(IllegalTransition):
            assert m.tick() is False
        assert m.state == PhaseState.active(0)

    def test_rep_card_reports_no_timer(self):
        m = _started(ExerciseTarget(reps=10))
        assert m.remaining_seconds is None
        assert m.progress == 0.0
        m.complete()
        assert m.progress == 1.0

    def test_execution_card_needs_target(self):
        with pytest.raises(ValueError):
            ExercisePhaseMachine(None)

    def test_countdown_state_bounds(self):
        with pytest.raises(ValueError):
            PhaseState.countdown(0)
        with pytest.raises(ValueError):
            PhaseState.countdown(4)

    def test_state_str(self):
        assert str(PhaseState.countdown(2)) == "Countdown(2)"
        assert str(PhaseState.active(7)) == "Active(7)"
        assert str(PhaseState.completed()) == "Completed"


# ===========================================================================
# Opponent affect
# ===========================================================================

def _signals(player: int = 0, ai: int = 0, turn: bool = False, override=None) -> SessionSignals:
    return SessionSignals(
        player_score=player,
        ai_score=ai,
        is_opponent_turn=turn,
        explicit_emotion_override=override,
    )


class TestDeriveEmotion:
    def test_opponent_turn_is_thinking(self):
        assert derive_emotion(_signals(0, 10, turn=True), "neutral") == "thinking"

    def test_lead_above_threshold(self):
        # ai − player = 3 > 2
        assert derive_emotion(_signals(2, 5), "neutral") == "confident"
        assert derive_emotion(_signals(5, 2), "neutral") == "determined"

    def test_lead_of_exactly_threshold_is_neutral(self):
        # |2| is not > 2 and not ≤ 1
        assert derive_emotion(_signals(0, 2), "neutral") == "neutral"
        assert derive_emotion(_signals(2, 0), "neutral") == "neutral"

    def test_close_scores_are_focused(self):
        assert derive_emotion(_signals(3, 3), "neutral") == "focused"
        assert derive_emotion(_signals(3, 4), "neutral") == "focused"

    def test_override_wins_when_different(self):
        assert derive_emotion(_signals(0, 10, turn=True, override="surprised"), "neutral") == "surprised"

    def test_override_equal_to_displayed_falls_through(self):
        assert derive_emotion(_signals(3, 3, override="confident"), "confident") == "focused"

    def test_reference_examples(self):
        assert derive_emotion(_signals(player=5, ai=10), "neutral") == "confident"
        assert derive_emotion(_signals(player=5, ai=5), "neutral") == "focused"
        assert derive_emotion(_signals(5, 5, override="celebratory"), "focused") == "celebratory"

    def test_custom_rules(self):
        rules = GameRules(score_lead_threshold=5, tie_margin=0)
        assert derive_emotion(_signals(0, 3), "neutral", rules) == "neutral"
        assert derive_emotion(_signals(0, 6), "neutral", rules) == "confident"


class TestEventEmotions:
    def test_player_good_exercise(self):
        assert emotion_for_event("player_good_exercise", ai_score=2, player_score=5) == "frustrated"
        assert emotion_for_event("player_good_exercise", ai_score=5, player_score=5) == "surprised"

    def test_other_events(self):
        assert emotion_for_event("ai_good_exercise", 0, 0) == "celebratory"
        assert emotion_for_event("tie", 4, 4) == "focused"
        assert emotion_for_event("game_start", 0, 0) == "confident"

    def test_unknown_event(self):
        with pytest.raises(ValueError):
            emotion_for_event("rage_quit", 0, 0)  # type: ignore[arg-type]


class TestOpponentConfidence:
    def test_labels_and_meter(self):
        # meter = 50 + 10 × (ai − player)
        assert opponent_confidence(5, 2).label == "High"
        assert opponent_confidence(5, 2).meter == 80
        assert opponent_confidence(1, 0).label == "Good"
        assert opponent_confidence(0, 2).label == "Moderate"
        assert opponent_confidence(0, 2).meter == 30
        assert opponent_confidence(0, 3).label == "Low"

    def test_meter_is_clamped(self):
        assert opponent_confidence(20, 0).meter == 100
        assert opponent_confidence(0, 9).meter == 0


class TestAffectDebounce:
    def _model(self):
        clock = ManualClock()
        changes: list[str] = []
        model = OpponentAffectModel(on_emotion_change=changes.append, clock=clock)
        return model, clock, changes

    def test_change_opens_window_and_notifies_once(self):
        model, clock, changes = self._model()
        assert model.update_displayed("confident")
        assert model.state.visible_until == AFFECT_VISIBILITY_MS
        assert changes == ["confident"]

    def test_same_emotion_does_not_extend_window(self):
        model, clock, changes = self._model()
        model.update_displayed("confident")
        clock.advance(1000)
        assert model.update_displayed("confident") is False
        assert model.state.visible_until == 3000
        assert changes == ["confident"]

    def test_window_closes_after_visibility(self):
        model, clock, _ = self._model()
        model.update_displayed("confident")
        assert model.message_visible(2999)
        assert model.current_message(2999) == "I've got this!"
        assert not model.message_visible(3000)
        assert model.current_message(3000) is None

    def test_new_change_replaces_open_window(self):
        model, clock, changes = self._model()
        model.update_displayed("confident")
        clock.advance(1000)
        model.update_displayed("focused")
        assert model.state.visible_until == 4000
        assert changes == ["confident", "focused"]

    def test_no_message_before_first_change(self):
        model, _, _ = self._model()
        assert model.current_message() is None
        assert model.expression == "😐"

    def test_refresh_and_event_channels(self):
        model, clock, changes = self._model()
        model.refresh(_signals(0, 0, turn=True))
        model.apply_event("ai_good_exercise", 4, 0)
        model.refresh(_signals(0, 4))
        assert changes == ["thinking", "celebratory", "confident"]

    def test_invalid_emotion_rejected(self):
        model, _, _ = self._model()
        with pytest.raises(ValueError):
            model.update_displayed("bored")  # type: ignore[arg-type]


# ===========================================================================
# Scoring
# ===========================================================================

class TestScoreBoard:
    def test_plain_card(self):
        board = ScoreBoard()
        award = board.award("player", _card(4))
        assert board.player_score == 4
        assert award.total_gain == 4

    def test_double_and_bonus(self):
        board = ScoreBoard()
        board.award("player", _card(4, "double"))
        assert board.player_score == 8
        board.award("opponent", _card(4, "bonus"))
        assert board.ai_score == 6

    def test_steal_moves_up_to_three(self):
        board = ScoreBoard(player_score=0, ai_score=10)
        award = board.award("player", _card(4, "steal"))
        assert award.transferred == 3
        assert board.player_score == 7
        assert board.ai_score == 7

    def test_steal_capped_by_opponent_total(self):
        board = ScoreBoard(player_score=0, ai_score=2)
        board.award("player", _card(4, "steal"))
        assert board.player_score == 6
        assert board.ai_score == 0

    def test_block_cancels_next_opposing_special(self):
        board = ScoreBoard()
        board.award("player", _card(5, "block"))
        assert board.player_shielded

        award = board.award("opponent", _card(4, "double"))
        assert award.special_blocked
        assert board.ai_score == 4
        assert not board.player_shielded

        board.award("opponent", _card(4, "double"))
        assert board.ai_score == 12

    def test_shield_survives_plain_cards(self):
        board = ScoreBoard()
        board.award("player", _card(5, "block"))
        board.award("opponent", _card(3))
        assert board.player_shielded

    def test_rules_tune_amounts(self):
        board = ScoreBoard(rules=GameRules(double_factor=3, bonus_points=5))
        board.award("player", _card(2, "double"))
        board.award("player", _card(2, "bonus"))
        assert board.player_score == 6 + 7

    def test_leader(self):
        board = ScoreBoard()
        assert board.leader is None
        board.award("opponent", _card(1))
        assert board.leader == "opponent"


# ===========================================================================
# Deck and opponent strategy
# ===========================================================================

class TestDeck:
    def test_card_points(self):
        # strength 4 × max(10/10, 1) = 4 ; 4 × 45/30 = 6 ; cardio 3 × 1 = 3
        assert card_points(_ex(reps=10)) == 4
        assert card_points(_ex("plank_hold", duration=45)) == 6
        assert card_points(_ex("jumping_jacks", category="cardio", duration=30)) == 3

    def test_missing_base_counts_as_one(self):
        # balance 2 × max(6/10, 1) = 2
        assert card_points(_ex("single_leg_balance", category="balance", reps=6)) == 2

    @pytest.mark.parametrize("card_type", CARD_TYPES)
    def test_execution_card_types_agree(self, card_type):
        ex = _ex(card_type=card_type)
        expected = card_type in EXECUTION_CARD_TYPES
        assert ex.requires_execution is expected
        assert _card(card_type=card_type).requires_execution is expected

    def test_make_card_metadata(self):
        card = make_card(_ex("stretch", category="flexibility", duration=30), "stretch-0")
        assert card.difficulty == 2
        assert card.type == "flexibility"
        assert card.combo_tag == "flow"
        assert card.requires_execution

    def test_build_deck_size_and_power_cards(self):
        exercises = [_ex(f"ex_{i}", reps=10) for i in range(10)]
        deck = build_deck(exercises, random.Random(1))
        # 10 × 3 copies = 30, power = max(2, int(3.0)) = 3
        assert len(deck) == 33
        power = [c for c in deck.cards if c.card_type == "power"]
        assert len(power) == 3
        assert all(c.special is not None for c in power)
        assert all(4 <= c.points <= 6 for c in power)

    def test_small_deck_has_two_power_cards(self):
        deck = build_deck([_ex(reps=10)], random.Random(1))
        assert len([c for c in deck.cards if c.card_type == "power"]) == 2

    def test_same_seed_same_deck(self):
        exercises = [_ex(f"ex_{i}", reps=10) for i in range(5)]
        a = build_deck(exercises, random.Random(42))
        b = build_deck(exercises, random.Random(42))
        assert [c.card_id for c in a.cards] == [c.card_id for c in b.cards]
        assert len({c.card_id for c in a.cards}) == len(a)

    def test_refill_hand_stops_when_deck_runs_out(self):
        deck = Deck([_card(card_id="a"), _card(card_id="b")])
        hand = refill_hand([], deck)
        assert [c.card_id for c in hand] == ["a", "b"]
        assert len(deck) == 0
        assert deck.draw() is None

    def test_combo_hint(self):
        a = _card(card_id="a", combo_tag="strength")
        b = _card(card_id="b", combo_tag="strength")
        c = _card(card_id="c", combo_tag="cardio")
        assert combo_count(a, [a, b, c]) == 2
        assert shows_combo_hint(a, [a, b, c])
        assert not shows_combo_hint(c, [a, b, c])


class TestOpponentStrategy:
    def test_desperate_prefers_special(self):
        hand = [_card(5, card_id="a"), _card(2, "bonus", card_id="b")]
        assert choose_opponent_card(hand, 10, 2, random.Random(0)).card_id == "b"

    def test_desperate_then_combo(self):
        hand = [
            _card(5, card_id="a", combo_tag="cardio"),
            _card(2, card_id="b", combo_tag="strength"),
            _card(1, card_id="c", combo_tag="strength"),
        ]
        assert choose_opponent_card(hand, 10, 2, random.Random(0)).card_id == "b"

    def test_desperate_then_highest_points(self):
        hand = [_card(2, card_id="a", combo_tag="x"), _card(5, card_id="b", combo_tag="y")]
        assert choose_opponent_card(hand, 10, 2, random.Random(0)).card_id == "b"

    def test_comfortable_lead_plays_weakest(self):
        hand = [_card(5, card_id="a"), _card(1, card_id="b"), _card(3, card_id="c")]
        assert choose_opponent_card(hand, 0, 4, random.Random(0)).card_id == "b"

    def test_close_game_picks_good_card(self):
        hand = [_card(2, card_id="a"), _card(5, card_id="b"), _card(3, card_id="c")]
        for seed in range(5):
            assert choose_opponent_card(hand, 3, 3, random.Random(seed)).card_id == "b"

    def test_empty_hand(self):
        with pytest.raises(ValueError):
            choose_opponent_card([], 0, 0, random.Random(0))
