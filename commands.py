# commands.py
import logging
from typing import Any, Callable, Dict

import config
import config_manager
from utils import format_duration

logger = logging.getLogger(__name__)


class CommandRouter:
    """
    Message-style entry point used by the UI surfaces. Every message is a
    dict with an ``action`` key; every response has a ``success`` flag.
    """

    def __init__(self, tracker, analytics=None):
        self.tracker = tracker
        self.store = tracker.store
        self.analytics = analytics
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            'startSession': self.start_session,
            'endSession': self.end_session,
            'getSessionData': self.get_session_data,
            'getForestData': self.get_forest_data,
            'getFocusMetrics': self.get_focus_metrics,
            'userActivity': self.user_activity,
            'tabChanged': self.tab_changed,
            'triggerFocusAnalysis': self.trigger_focus_analysis,
            'testAPI': self.test_api,
            'windowFocusChanged': self.window_focus_changed,
            'idleStateChanged': self.idle_state_changed,
            'getSessionStats': self.get_session_stats,
            'updateConfig': self.update_config,
        }

    def handle(self, message: Dict[str, Any]) -> Dict[str, Any]:
        action = (message or {}).get('action')
        handler = self._handlers.get(action)
        if handler is None:
            logger.warning(f"Unknown action: {action}")
            return {'success': False, 'error': 'Unknown action'}
        try:
            return handler(message)
        except Exception as e:
            logger.error(f"Command {action} failed: {e}")
            return {'success': False, 'error': str(e)}

    # --- Session ---

    def start_session(self, message):
        session_id = self.tracker.start_session()
        return {'success': True, 'sessionId': session_id}

    def end_session(self, message):
        self.tracker.end_session()
        return {'success': True}

    def get_session_data(self, message):
        return {'success': True, 'data': self.store.get(config.SESSION_STATE)}

    def get_forest_data(self, message):
        return {'success': True, 'data': self.store.get(config.FOREST_STATE)}

    def get_focus_metrics(self, message):
        return {'success': True, 'data': self.store.get(config.FOCUS_METRICS)}

    # --- Activity ---

    def user_activity(self, message):
        self.tracker.handle_activity(message.get('eventType'), message.get('data'))
        return {'success': True}

    def tab_changed(self, message):
        if not message.get('url'):
            raise ValueError("tabChanged requires a url")
        self.tracker.handle_tab_change(message.get('tabId'), message['url'])
        return {'success': True}

    def window_focus_changed(self, message):
        self.tracker.handle_window_focus(bool(message.get('focused')))
        return {'success': True}

    def idle_state_changed(self, message):
        state = message.get('state')
        if state not in ('active', 'idle', 'locked'):
            raise ValueError(f"Unknown idle state: {state}")
        self.tracker.handle_idle_state(state)
        return {'success': True}

    # --- Analysis ---

    def trigger_focus_analysis(self, message):
        analysis = self.tracker.perform_focus_tick()
        if analysis is None:
            return {'success': False, 'error': 'No active session'}
        return {'success': True, 'message': 'Analysis completed', 'data': analysis.to_dict()}

    def test_api(self, message):
        return self.tracker.test_api()

    def get_session_stats(self, message):
        if self.analytics is None:
            raise RuntimeError("Session statistics are not available")
        stats = self.analytics.get_session_stats()
        stats['durationText'] = format_duration(stats['duration_seconds'])
        return {'success': True, 'data': stats}

    # --- Configuration ---

    def update_config(self, message):
        updates = {}
        if 'provider' in message:
            updates['provider'] = message['provider']
        if 'apiKey' in message:
            updates['api_key'] = message['apiKey'] or None
        if 'useCache' in message:
            updates['use_cache'] = message['useCache']
        api_config = config_manager.update_api_config(self.store, **updates)
        self.tracker.reload_providers()
        return {'success': True, 'data': {'provider': api_config.provider, 'useCache': api_config.use_cache}}
