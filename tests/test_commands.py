"""Tests for the message-style command router."""

import pytest

from analytics import SessionAnalytics
from commands import CommandRouter
from Providers.AIProvider import ProviderError
from Providers.OpenAIProvider import OpenAIProvider
from tracker import ForestTracker


@pytest.fixture
def tracker(store, clock, rng, monkeypatch):
    forest_tracker = ForestTracker(store, clock=clock, rng=rng)
    # Ticks are driven by hand in these tests
    monkeypatch.setattr(forest_tracker, "start_monitoring", lambda: None)
    yield forest_tracker
    forest_tracker.cleanup()


@pytest.fixture
def router(tracker, store, clock):
    return CommandRouter(tracker, analytics=SessionAnalytics(store, clock=clock))


@pytest.mark.parametrize("message", [{"action": "plantDragons"}, {}, None])
def test_unknown_action(router, message):
    assert router.handle(message) == {'success': False, 'error': 'Unknown action'}


def test_session_round_trip(router):
    started = router.handle({"action": "startSession"})
    assert started['success'] is True

    session = router.handle({"action": "getSessionData"})['data']
    assert session['active'] is True
    assert session['session_id'] == started['sessionId']

    forest = router.handle({"action": "getForestData"})['data']
    assert len(forest['trees']) == 5
    assert forest['session_id'] == started['sessionId']

    assert router.handle({"action": "endSession"}) == {'success': True}
    assert router.handle({"action": "getSessionData"})['data']['active'] is False


def test_double_start_is_rejected(router):
    router.handle({"action": "startSession"})

    response = router.handle({"action": "startSession"})

    assert response['success'] is False
    assert response['error']


def test_end_without_session_is_rejected(router):
    assert router.handle({"action": "endSession"})['success'] is False


def test_user_activity(router, store):
    router.handle({"action": "startSession"})

    assert router.handle({"action": "userActivity", "eventType": "keyboard"}) == {'success': True}

    response = router.handle({"action": "userActivity", "eventType": "sneeze"})
    assert response['success'] is False


def test_tab_changed(router):
    router.handle({"action": "startSession"})

    assert router.handle({"action": "tabChanged", "tabId": 7, "url": "https://reddit.com/r/all"})['success']
    metrics = router.handle({"action": "getFocusMetrics"})['data']
    assert metrics['active_url'] == "https://reddit.com/r/all"
    assert metrics['active_tab_id'] == 7
    assert router.handle({"action": "getSessionData"})['data']['distraction_count'] == 1

    missing = router.handle({"action": "tabChanged", "tabId": 7})
    assert missing['success'] is False


def test_window_and_idle_commands(router):
    router.handle({"action": "startSession"})

    assert router.handle({"action": "windowFocusChanged", "focused": False})['success']
    assert router.handle({"action": "getFocusMetrics"})['data']['window_focused'] is False

    assert router.handle({"action": "idleStateChanged", "state": "idle"})['success']
    assert router.handle({"action": "getSessionData"})['data']['paused'] is True

    assert router.handle({"action": "idleStateChanged", "state": "dozing"})['success'] is False


def test_trigger_focus_analysis(router):
    assert router.handle({"action": "triggerFocusAnalysis"}) == {
        'success': False, 'error': 'No active session'
    }

    router.handle({"action": "startSession"})
    response = router.handle({"action": "triggerFocusAnalysis"})

    assert response['success'] is True
    assert response['data']['focus_score'] == 58
    assert response['data']['distraction_level'] == "medium"


def test_test_api_mock_mode(router):
    response = router.handle({"action": "testAPI"})
    assert response['success'] is True


def test_test_api_failure(router, tracker, make_provider):
    tracker.reload_providers(make_provider(error=ProviderError("401 Unauthorized")))

    response = router.handle({"action": "testAPI"})

    assert response == {'success': False, 'error': '401 Unauthorized'}


def test_update_config(router, tracker):
    bad = router.handle({"action": "updateConfig", "provider": "skynet"})
    assert bad['success'] is False
    assert tracker.ai_provider is None

    response = router.handle({"action": "updateConfig", "provider": "openai", "apiKey": "sk-test"})

    assert response == {'success': True, 'data': {'provider': "openai", 'useCache': True}}
    assert isinstance(tracker.ai_provider, OpenAIProvider)
    assert tracker.scorer.uses_external is True

    router.handle({"action": "updateConfig", "provider": "mock", "apiKey": ""})
    assert tracker.ai_provider is None


def test_session_stats(router, clock):
    router.handle({"action": "startSession"})
    clock.advance(3725)

    stats = router.handle({"action": "getSessionStats"})['data']

    assert stats['durationText'] == "01:02:05"
    assert stats['status'] == "active"
    assert stats['trees_total'] == 5
    assert stats['forest_health'] == 1.0


def test_session_stats_without_analytics(tracker):
    response = CommandRouter(tracker).handle({"action": "getSessionStats"})
    assert response['success'] is False
