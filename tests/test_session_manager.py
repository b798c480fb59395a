"""Tests for SessionManager and focus score smoothing."""

import random

import pytest

import config
from ForestEngine.enums import SessionStatus
from ForestEngine.forest_growth import ForestGrowthEngine
from ForestEngine.session_manager import SessionManager, smooth_focus_score
from ForestEngine.transitions import InvalidTransitionError


@pytest.fixture
def manager(store, clock, rng):
    return SessionManager(store, ForestGrowthEngine(store, rng=rng, clock=clock), clock=clock)


def test_smoothing_stays_bounded():
    """Test that any sequence of raw scores keeps the smoothed score in [0, 100]."""
    samples = random.Random(7)
    score = 100.0
    for _ in range(500):
        score = smooth_focus_score(score, samples.uniform(-50, 150))
        assert 0 <= score <= 100


def test_recovery_is_faster_than_decline():
    assert smooth_focus_score(50, 100) >= 97.5
    assert smooth_focus_score(50, 0) <= 20


def test_equal_sample_uses_decline_weights():
    assert smooth_focus_score(60, 60) == pytest.approx(60)


def test_start_session(manager, store, clock):
    session_id = manager.start_session()

    session = store.session_state()
    assert session.status == SessionStatus.ACTIVE
    assert session.session_id == session_id
    assert session.focus_score == 100
    assert session.start_time == clock.now

    forest = store.forest_state()
    assert forest.session_id == session_id
    assert forest.session_active is True
    assert len(forest.trees) == 5

    metrics = store.focus_metrics()
    assert metrics.tab_switch_count == 0
    assert metrics.current_site_arrival_time == clock.now


def test_start_session_resets_metrics(manager, store):
    store.set(config.FOCUS_METRICS, {'tab_switch_count': 12, 'active_url': 'https://youtube.com'})

    manager.start_session()

    metrics = store.focus_metrics()
    assert metrics.tab_switch_count == 0
    assert metrics.active_url is None


def test_start_while_active_raises(manager):
    manager.start_session()
    with pytest.raises(InvalidTransitionError):
        manager.start_session()


def test_end_session_keeps_forest(manager, store, clock):
    session_id = manager.start_session()
    clock.advance(120)

    ended = manager.end_session()

    assert ended.status == SessionStatus.ENDED
    assert ended.end_time == clock.now
    forest = store.forest_state()
    assert forest.session_id == session_id
    assert forest.session_active is False
    assert len(forest.trees) == 5


def test_end_without_session_raises(manager):
    with pytest.raises(InvalidTransitionError):
        manager.end_session()


def test_new_session_after_end(manager, store):
    first = manager.start_session()
    manager.end_session()

    second = manager.start_session()

    assert second != first
    session = store.session_state()
    assert session.active is True
    assert session.end_time is None


def test_pause_and_resume_are_noops_in_wrong_state(manager):
    assert manager.pause() is False
    assert manager.resume() is False

    manager.start_session()
    assert manager.resume() is False
    assert manager.pause() is True
    assert manager.pause() is False
    assert manager.status() == SessionStatus.PAUSED
    assert manager.resume() is True
    assert manager.status() == SessionStatus.ACTIVE


def test_update_focus_score_smooths(manager):
    manager.start_session()

    assert manager.update_focus_score(40) == pytest.approx(100 * 0.4 + 40 * 0.6)


def test_update_focus_score_noop_unless_running(manager, store):
    assert manager.update_focus_score(10) is None

    manager.start_session()
    manager.pause()
    assert manager.update_focus_score(10) is None
    assert store.session_state().focus_score == 100


def test_update_focus_score_ignores_other_session(manager, store):
    manager.start_session()

    assert manager.update_focus_score(10, session_id="stale") is None
    assert store.session_state().focus_score == 100


def test_touch_activity_resumes_paused_session(manager, store, clock):
    manager.start_session()
    manager.pause()
    clock.advance(30)

    assert manager.touch_activity() is True
    session = store.session_state()
    assert session.status == SessionStatus.ACTIVE
    assert session.last_activity_timestamp == clock.now
    assert manager.touch_activity() is False


def test_distraction_penalty(manager, store):
    manager.start_session()

    assert manager.apply_distraction_penalty(0.15) == pytest.approx(85)
    session = store.session_state()
    assert session.distraction_count == 1


def test_distraction_penalty_floors_at_zero(manager):
    manager.start_session()
    for _ in range(12):
        score = manager.apply_distraction_penalty(0.2)
    assert score == 0


def test_focused_ticks_accumulate_minutes(manager, store):
    manager.start_session()
    for _ in range(3):
        assert manager.record_focused_tick(20)
    assert store.session_state().focused_minutes == 1

    assert manager.record_focused_tick(60)
    assert store.session_state().focused_minutes == 2


def test_resume_session_after_restart(manager, store, clock, rng):
    manager.start_session()
    clock.advance(600)

    restarted = SessionManager(store, ForestGrowthEngine(store, rng=rng, clock=clock), clock=clock)

    assert restarted.resume_session() is True
    assert store.session_state().last_activity_timestamp == clock.now


def test_resume_session_without_active_session(manager):
    assert manager.resume_session() is False


def test_scenario_a_sustained_high_focus(manager, store):
    """Five ticks at raw 90 keep the smoothed score at or above 85."""
    manager.start_session()
    for _ in range(5):
        score = manager.update_focus_score(90)
    assert score >= 85
    assert store.session_state().focus_score >= 85


def test_scenario_b_sustained_distraction_drops_score(manager, store):
    manager.start_session()
    store.merge(config.SESSION_STATE, {'focus_score': 80})

    for _ in range(3):
        score = manager.update_focus_score(10)

    assert score < 40
