import pytest

import config
from analytics import SessionAnalytics
from ForestEngine.enums import TreeStatus
from ForestEngine.forest_growth import ForestGrowthEngine
from ForestEngine.session_manager import SessionManager


@pytest.fixture
def sessions(store, clock, rng):
    return SessionManager(store, ForestGrowthEngine(store, rng=rng, clock=clock), clock=clock)


@pytest.fixture
def analytics(store, clock):
    return SessionAnalytics(store, clock=clock)


def set_status(store, index, status):
    def _set(forest):
        forest['trees'][index]['status'] = status.value
        return forest
    store.update(config.FOREST_STATE, _set)


def test_stats_before_any_session(analytics):
    stats = analytics.get_session_stats()

    assert stats['status'] == "idle"
    assert stats['duration_seconds'] == 0
    assert stats['trees_total'] == 0
    assert stats['forest_health'] == 1.0


def test_duration_runs_while_active_and_freezes_on_end(sessions, analytics, clock):
    sessions.start_session()
    clock.advance(90)
    assert analytics.get_session_duration() == 90

    sessions.end_session()
    clock.advance(500)
    assert analytics.get_session_duration() == 90


def test_tree_counts_and_health(sessions, analytics, store):
    sessions.start_session()
    set_status(store, 0, TreeStatus.BURNT)
    set_status(store, 1, TreeStatus.BURNING)
    set_status(store, 2, TreeStatus.RECOVERING)

    counts = analytics.get_tree_counts()

    assert counts == {"healthy": 2, "burning": 1, "burnt": 1, "recovering": 1}
    assert analytics.get_forest_health() == pytest.approx(0.6)


def test_stats_report_focus_time(sessions, analytics, store):
    sessions.start_session()
    sessions.record_focused_tick(60 * 75)
    sessions.apply_distraction_penalty(0.1)

    stats = analytics.get_session_stats()

    assert stats['focused_minutes'] == 75
    assert stats['focused_time'] == "1h 15m"
    assert stats['distraction_count'] == 1
    assert stats['focus_score'] == 90
    assert stats['wildfire_active'] is False
