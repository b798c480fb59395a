import logging
import time
from typing import Any, Callable, Dict, Optional, Union

import config
from config_manager import find_distraction_site
from ForestEngine.enums import ActivityType, TabSwitchPolicy
from models import ActivityEvent, FocusMetrics
from utils import extract_domain

logger = logging.getLogger(__name__)


class ActivityMonitor:
    """
    Turns raw host events (input activity, tab and window changes) into the
    focusMetrics document read by the scoring tick.
    """

    def __init__(self, store, clock: Callable[[], float] = time.time,
                 inactivity_threshold: float = config.INACTIVITY_THRESHOLD,
                 tab_switch_policy: Union[TabSwitchPolicy, str] = config.TAB_SWITCH_POLICY):
        self.store = store
        self.clock = clock
        self.inactivity_threshold = inactivity_threshold
        self.tab_switch_policy = TabSwitchPolicy(tab_switch_policy)

    def get_metrics(self) -> FocusMetrics:
        return self.store.focus_metrics()

    def record_activity(self, event: Union[ActivityEvent, Dict[str, Any]]) -> FocusMetrics:
        """
        Records keyboard/mouse/scroll/tab_switch/url_change activity.

        Raises:
            ValueError: for an unknown event type
        """
        if isinstance(event, dict):
            event = ActivityEvent(type=event.get('type'), timestamp=event.get('timestamp'),
                                  data=event.get('data'))
        activity_type = ActivityType(event.type)
        timestamp = event.timestamp or self.clock()
        data = event.data or {}

        def _record(current):
            metrics = FocusMetrics.from_dict(current)
            metrics.last_activity_timestamp = max(metrics.last_activity_timestamp, timestamp)
            metrics.inactivity_duration = 0.0
            # Visibility changes arrive as tab_switch events; switches themselves
            # are counted by record_tab_change.
            if activity_type == ActivityType.TAB_SWITCH and 'visible' in data:
                metrics.tab_visible = bool(data['visible'])
            return metrics.to_dict()

        return FocusMetrics.from_dict(self.store.update(config.FOCUS_METRICS, _record))

    def record_tab_change(self, tab_id: Optional[int], url: str) -> bool:
        """
        Updates the active tab. Returns True when the change counted as a
        switch: a different domain, or a URL that cannot be parsed.
        """
        now = self.clock()
        counted = []

        def _change(current):
            counted.clear()
            metrics = FocusMetrics.from_dict(current)
            new_domain = extract_domain(url)

            if new_domain is None:
                is_switch = True
            elif metrics.active_url is None:
                is_switch = False  # first site of the session
            else:
                is_switch = extract_domain(metrics.active_url) != new_domain

            if is_switch:
                metrics.time_on_distracting_sites += self._distracting_dwell(metrics, now)
                metrics.tab_switch_count += 1
                metrics.current_site_arrival_time = now
                counted.append(True)
            elif metrics.active_url is None:
                metrics.current_site_arrival_time = now

            metrics.active_tab_id = tab_id
            metrics.active_url = url
            metrics.last_activity_timestamp = now
            metrics.inactivity_duration = 0.0
            return metrics.to_dict()

        self.store.update(config.FOCUS_METRICS, _change)
        if counted:
            logger.debug(f"Tab switch to {extract_domain(url) or url}")
        return bool(counted)

    def record_window_focus(self, focused: bool) -> None:
        now = self.clock()

        def _focus(current):
            metrics = FocusMetrics.from_dict(current)
            metrics.window_focused = bool(focused)
            if focused:
                metrics.last_activity_timestamp = now
                metrics.inactivity_duration = 0.0
            return metrics.to_dict()

        self.store.update(config.FOCUS_METRICS, _focus)

    def check_inactivity(self) -> bool:
        """Refreshes inactivity_duration; True once it exceeds the threshold."""
        now = self.clock()

        def _check(current):
            metrics = FocusMetrics.from_dict(current)
            metrics.inactivity_duration = max(0.0, now - metrics.last_activity_timestamp)
            return metrics.to_dict()

        metrics = FocusMetrics.from_dict(self.store.update(config.FOCUS_METRICS, _check))
        return metrics.inactivity_duration > self.inactivity_threshold

    def reset_tab_switch_count(self, force: bool = False) -> bool:
        """Clears the switch counter at the end of a scoring window, per the configured policy."""
        if self.tab_switch_policy == TabSwitchPolicy.PER_SESSION and not force:
            return False

        def _reset(current):
            if current.get('tab_switch_count', 0) == 0:
                return None
            current['tab_switch_count'] = 0
            return current

        self.store.update(config.FOCUS_METRICS, _reset)
        return True

    def time_on_current_site(self, metrics: Optional[FocusMetrics] = None) -> float:
        metrics = metrics or self.get_metrics()
        if not metrics.current_site_arrival_time:
            return 0.0
        return max(0.0, self.clock() - metrics.current_site_arrival_time)

    def _distracting_dwell(self, metrics: FocusMetrics, now: float) -> float:
        """Time spent on the site being left, if it is a distraction site."""
        if not metrics.active_url or not metrics.current_site_arrival_time:
            return 0.0
        if find_distraction_site(self.store, extract_domain(metrics.active_url)) is None:
            return 0.0
        return max(0.0, now - metrics.current_site_arrival_time)
