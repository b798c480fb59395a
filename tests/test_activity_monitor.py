"""Tests for ActivityMonitor."""

import pytest

from ForestEngine.enums import TabSwitchPolicy
from layers.activity_monitor import ActivityMonitor
from models import ActivityEvent


@pytest.fixture
def monitor(store, clock):
    return ActivityMonitor(store, clock=clock)


def test_unknown_activity_type_raises(monitor):
    with pytest.raises(ValueError):
        monitor.record_activity(ActivityEvent(type="telepathy", timestamp=0))


def test_activity_resets_idle_clock(monitor, clock):
    monitor.record_activity(ActivityEvent(type="keyboard", timestamp=clock.now))
    clock.advance(200)
    monitor.check_inactivity()

    metrics = monitor.record_activity({'type': 'mouse', 'timestamp': clock.now})

    assert metrics.last_activity_timestamp == clock.now
    assert metrics.inactivity_duration == 0


def test_visibility_change_does_not_count_as_switch(monitor, clock):
    metrics = monitor.record_activity(ActivityEvent(type="tab_switch", timestamp=clock.now,
                                                    data={'visible': False}))

    assert metrics.tab_visible is False
    assert metrics.tab_switch_count == 0


def test_first_site_is_not_a_switch(monitor, clock):
    assert monitor.record_tab_change(1, "https://github.com/pallets/flask") is False

    metrics = monitor.get_metrics()
    assert metrics.active_tab_id == 1
    assert metrics.active_url == "https://github.com/pallets/flask"
    assert metrics.current_site_arrival_time == clock.now


def test_cross_domain_change_counts(monitor, clock):
    monitor.record_tab_change(1, "https://github.com")
    clock.advance(30)

    assert monitor.record_tab_change(2, "https://docs.python.org/3/") is True

    metrics = monitor.get_metrics()
    assert metrics.tab_switch_count == 1
    assert metrics.current_site_arrival_time == clock.now


def test_same_domain_navigation_is_suppressed(monitor, clock):
    monitor.record_tab_change(1, "https://www.github.com/issues")
    arrival = clock.now
    clock.advance(30)

    assert monitor.record_tab_change(1, "https://github.com/pulls") is False

    metrics = monitor.get_metrics()
    assert metrics.tab_switch_count == 0
    assert metrics.active_url == "https://github.com/pulls"
    assert metrics.current_site_arrival_time == arrival


def test_unparsable_url_counts_as_switch(monitor):
    monitor.record_tab_change(1, "https://github.com")

    assert monitor.record_tab_change(1, "not a url") is True
    assert monitor.get_metrics().tab_switch_count == 1


def test_time_on_distracting_sites_accumulates(monitor, clock):
    monitor.record_tab_change(1, "https://www.youtube.com/watch?v=1")
    clock.advance(90)
    monitor.record_tab_change(1, "https://github.com")
    clock.advance(60)
    monitor.record_tab_change(1, "https://docs.python.org")

    assert monitor.get_metrics().time_on_distracting_sites == 90


def test_time_on_current_site(monitor, clock):
    monitor.record_tab_change(1, "https://github.com")
    clock.advance(125)

    assert monitor.time_on_current_site() == 125


def test_check_inactivity_threshold(monitor, clock):
    monitor.record_activity(ActivityEvent(type="scroll", timestamp=clock.now))

    clock.advance(299)
    assert monitor.check_inactivity() is False
    clock.advance(2)
    assert monitor.check_inactivity() is True
    assert monitor.get_metrics().inactivity_duration == 301


def test_window_focus(monitor, clock):
    monitor.record_window_focus(False)
    assert monitor.get_metrics().window_focused is False

    clock.advance(10)
    monitor.record_window_focus(True)
    metrics = monitor.get_metrics()
    assert metrics.window_focused is True
    assert metrics.last_activity_timestamp == clock.now


def test_reset_per_tick(monitor):
    monitor.record_tab_change(1, "https://a.com")
    monitor.record_tab_change(1, "https://b.com")

    assert monitor.reset_tab_switch_count() is True
    assert monitor.get_metrics().tab_switch_count == 0


def test_reset_per_session_keeps_count(store, clock):
    monitor = ActivityMonitor(store, clock=clock, tab_switch_policy="per_session")
    assert monitor.tab_switch_policy == TabSwitchPolicy.PER_SESSION
    monitor.record_tab_change(1, "https://a.com")
    monitor.record_tab_change(1, "https://b.com")

    assert monitor.reset_tab_switch_count() is False
    assert monitor.get_metrics().tab_switch_count == 1
    assert monitor.reset_tab_switch_count(force=True) is True
    assert monitor.get_metrics().tab_switch_count == 0


def test_unknown_policy_rejected(store):
    with pytest.raises(ValueError):
        ActivityMonitor(store, tab_switch_policy="hourly")
