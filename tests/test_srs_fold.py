from datetime import timedelta

import pytest

from oratoria_srs.config import SrsSettings
from oratoria_srs.models import OutputModality, SchedulingState
from oratoria_srs.srs import Scheduler, make_outcome


def _state(t0, **overrides) -> SchedulingState:
    data = dict(
        ease_factor=2.5,
        interval=10,
        repetitions=4,
        stability=2.0,
        difficulty=0.3,
        next_review=t0,
        last_review=t0 - timedelta(days=10),
    )
    data.update(overrides)
    return SchedulingState(**data)


def test_initial_state_law(scheduler, t0):
    state = scheduler.initial_state(t0)

    assert state.ease_factor == 2.5
    assert state.interval == 1
    assert state.repetitions == 0
    assert state.stability == 1.0
    assert state.difficulty == 0.3
    assert state.next_review == t0
    assert state.last_review is None


def test_three_correct_typed_reviews_follow_sm2_progression(scheduler, t0):
    state = scheduler.initial_state(t0)
    intervals = []
    for day in (1, 2, 3):
        outcome = make_outcome(1, OutputModality.typed, t0 + timedelta(days=day))
        state = scheduler.fold(state, outcome)
        intervals.append(state.interval)

    # ease: 2.5 -> 2.6 -> 2.7, third interval = round(6 * 2.7)
    assert intervals == [1, 6, 16]
    assert state.repetitions == 3
    assert state.ease_factor == pytest.approx(2.8)
    assert state.last_review == t0 + timedelta(days=3)
    assert state.next_review == t0 + timedelta(days=3 + 16)


@pytest.mark.parametrize("repetitions", [0, 1, 5])
def test_failure_resets_repetitions_and_interval(scheduler, t0, repetitions):
    prior = _state(t0, repetitions=repetitions, interval=30, stability=3.5, difficulty=0.7)
    reviewed_at = t0 + timedelta(hours=2)

    state = scheduler.fold(prior, make_outcome(0, "spoken", reviewed_at))

    assert state.repetitions == 0
    assert state.interval == 1
    assert state.ease_factor == pytest.approx(2.3)
    # 基本形では stability / difficulty は持ち越し
    assert state.stability == 3.5
    assert state.difficulty == 0.7
    assert state.next_review == reviewed_at + timedelta(days=1)
    assert state.last_review == reviewed_at


def test_partial_credit_counts_as_success_with_lower_ease(scheduler, t0):
    state = scheduler.fold(scheduler.initial_state(t0), make_outcome(0.5, "typed", t0))

    assert state.repetitions == 1
    assert state.interval == 1
    # q=3: 2.5 + (0.1 - 2 * (0.08 + 2 * 0.02))
    assert state.ease_factor == pytest.approx(2.36)
    assert state.stability == pytest.approx(0.96)


@pytest.mark.parametrize(
    ("ease", "quality"),
    [(1.3, 0), (1.3, 0.5), (1.35, 0.5), (1.4, 0), (1.3, 1)],
)
def test_ease_factor_never_drops_below_floor(scheduler, t0, ease, quality):
    state = scheduler.fold(_state(t0, ease_factor=ease), make_outcome(quality, "typed", t0))

    assert state.ease_factor >= 1.3


def test_interval_uses_previous_ease_and_rounds_half_up(scheduler, t0):
    # 5 * 2.5 = 12.5 -> 13
    state = scheduler.fold(_state(t0, interval=5, repetitions=2), make_outcome(1, "typed", t0))

    assert state.interval == 13
    assert state.repetitions == 3


def test_spoken_success_grows_stability_at_least_as_much_as_typed(scheduler, t0):
    prior = _state(t0)

    spoken = scheduler.fold(prior, make_outcome(1, "spoken", t0))
    typed = scheduler.fold(prior, make_outcome(1, "typed", t0))

    assert spoken.stability >= typed.stability
    assert spoken.stability == pytest.approx(2.0 * 1.24)
    assert typed.stability == pytest.approx(2.0 * 1.2)
    assert spoken.interval == typed.interval
    assert spoken.ease_factor == typed.ease_factor


def test_flashcard_weighs_like_typed(scheduler, t0):
    prior = _state(t0)

    flashcard = scheduler.fold(prior, make_outcome(1, "flashcard", t0))
    typed = scheduler.fold(prior, make_outcome(1, "typed", t0))

    assert flashcard == typed


@pytest.mark.parametrize("modality", ["spoken", "typed"])
def test_partial_credit_stability_not_above_full_credit(scheduler, t0, modality):
    prior = _state(t0)

    partial = scheduler.fold(prior, make_outcome(0.5, modality, t0))
    full = scheduler.fold(prior, make_outcome(1, modality, t0))

    assert partial.stability <= full.stability


def test_stability_is_capped(scheduler, t0):
    state = scheduler.fold(_state(t0, stability=9.5), make_outcome(1, "spoken", t0))

    assert state.stability == 10.0


def test_fold_does_not_mutate_input(scheduler, t0):
    prior = _state(t0)
    snapshot = prior.model_dump()

    scheduler.fold(prior, make_outcome(0, "typed", t0))
    scheduler.fold(prior, make_outcome(1, "spoken", t0))

    assert prior.model_dump() == snapshot


def test_custom_weights_flow_through_scheduler(t0):
    params = SrsSettings(_env_file=None, spoken_weight=2.0, stability_gain=0.5, failure_stability_factor=0.5)
    engine = Scheduler.from_settings(params)
    prior = engine.initial_state(t0)

    spoken = engine.fold(prior, make_outcome(1, "spoken", t0))
    failed = engine.fold(spoken, make_outcome(0, "typed", t0 + timedelta(days=1)))

    assert spoken.stability == pytest.approx(2.0)
    assert failed.stability == pytest.approx(1.0)


def test_long_success_streak_keeps_interval_within_cap(scheduler, t0):
    state = scheduler.initial_state(t0)
    for day in range(1, 41):
        state = scheduler.fold(state, make_outcome(1, "spoken", t0 + timedelta(days=day)))

    assert state.repetitions == 40
    assert state.interval == scheduler.params.max_interval_days == 365
    assert state.next_review == t0 + timedelta(days=40 + 365)


def test_replay_of_long_success_streak_does_not_overflow(scheduler, t0):
    outcomes = [make_outcome(1, "typed", t0 + timedelta(days=day)) for day in range(1, 31)]

    state = scheduler.replay(outcomes, now=t0)

    assert state.interval <= scheduler.params.max_interval_days


def test_custom_interval_cap_applies_to_early_steps(t0):
    engine = Scheduler(SrsSettings(_env_file=None, max_interval_days=4))
    state = engine.initial_state(t0)
    intervals = []
    for day in (1, 2, 3):
        state = engine.fold(state, make_outcome(1, "typed", t0 + timedelta(days=day)))
        intervals.append(state.interval)

    assert intervals == [1, 4, 4]
