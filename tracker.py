# tracker.py
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import config
from config_manager import find_distraction_site
from distraction_classifier import DistractionClassifier
from focus_scorer import FocusScorer
from ForestEngine.forest_growth import ForestGrowthEngine
from ForestEngine.session_manager import SessionManager
from ForestEngine.wildfire import LowFocusWatch, WildfireEngine
from layers.activity_monitor import ActivityMonitor
from layers.notification_controller import NotificationController
from layers.scheduler import PeriodicTimer
from models import ActivityEvent, FocusAnalysis, FocusAnalysisRequest
from Providers.InitAIProvider import AIProviderManager
from utils import extract_domain

logger = logging.getLogger(__name__)


class ForestTracker:
    """
    Wires the engines together and drives them from three periodic timers:
    the scoring tick, the wildfire tick and the idle check.
    """

    def __init__(self, store, ai_provider=None, notifier: Optional[NotificationController] = None,
                 clock=time.time, rng: Optional[random.Random] = None,
                 focus_interval: float = config.FOCUS_TICK_INTERVAL,
                 wildfire_interval: float = config.WILDFIRE_TICK_INTERVAL,
                 idle_interval: float = config.IDLE_CHECK_INTERVAL,
                 tab_switch_policy: str = config.TAB_SWITCH_POLICY):
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()
        self.focus_interval = focus_interval
        self.wildfire_interval = wildfire_interval
        self.idle_interval = idle_interval

        # Engines
        self.growth = ForestGrowthEngine(store, rng=self.rng, clock=clock)
        self.sessions = SessionManager(store, self.growth, clock=clock)
        self.wildfire = WildfireEngine(store, rng=self.rng, clock=clock)
        self.monitor = ActivityMonitor(store, clock=clock, tab_switch_policy=tab_switch_policy)
        self.notifier = notifier or NotificationController()
        self.low_focus = LowFocusWatch()

        # Providers
        self.provider_manager = AIProviderManager()
        self.reload_providers(ai_provider)

        # Thread management
        self.lock = threading.Lock()
        self.executor: Optional[ThreadPoolExecutor] = None
        self._timers = []
        self._active_futures = set()

    def reload_providers(self, ai_provider=None) -> None:
        """(Re)builds the classifier and scorer from the stored API config."""
        api_config = self.store.api_config()
        if ai_provider is None:
            ai_provider = self.provider_manager.from_api_config(api_config)
        self.ai_provider = ai_provider
        self.classifier = DistractionClassifier(
            self.store, ai_provider=ai_provider, use_cache=api_config.use_cache, clock=self.clock
        )
        self.scorer = FocusScorer(self.classifier, provider=ai_provider)
        source = type(ai_provider).__name__ if ai_provider else "heuristic"
        logger.info(f"Focus scoring uses {source}")

    # === Monitoring ===

    @property
    def is_monitoring(self) -> bool:
        return bool(self._timers)

    def start_monitoring(self) -> None:
        with self.lock:
            if self._timers:
                logger.warning("Monitoring is already running.")
                return
            self.executor = ThreadPoolExecutor(max_workers=config.TIMER_WORKERS,
                                               thread_name_prefix="verdant-tick")
            self._timers = [
                PeriodicTimer("focus", self.focus_interval, self.perform_focus_tick,
                              self.executor, run_immediately=True, on_submit=self._track_future),
                PeriodicTimer("wildfire", self.wildfire_interval, self.wildfire_tick,
                              self.executor, on_submit=self._track_future),
                PeriodicTimer("idle", self.idle_interval, self.idle_check,
                              self.executor, on_submit=self._track_future),
            ]
            for timer in self._timers:
                timer.start()
        logger.info("Monitoring started")

    def stop_monitoring(self) -> None:
        with self.lock:
            timers, self._timers = self._timers, []
            for timer in timers:
                timer.stop()
            self._cancel_all_futures()
            if self.executor:
                self.executor.shutdown(wait=False)
                self.executor = None
            self.low_focus.reset()
        if timers:
            logger.info("Monitoring stopped")

    def _track_future(self, future):
        """Add future to tracking set and set up cleanup callback."""
        self._active_futures.add(future)
        future.add_done_callback(lambda f: self._active_futures.discard(f))
        return future

    def _cancel_all_futures(self):
        """Cancel all pending futures. Running ticks are left to finish."""
        cancelled_count = 0
        for future in list(self._active_futures):
            if not future.done() and future.cancel():
                cancelled_count += 1
        self._active_futures.clear()
        if cancelled_count > 0:
            logger.info(f"Cancelled {cancelled_count} pending ticks")

    # === Session commands ===

    def start_session(self) -> str:
        session_id = self.sessions.start_session()
        self.low_focus.reset()
        self.start_monitoring()
        return session_id

    def end_session(self):
        session = self.sessions.end_session()
        self.stop_monitoring()
        return session

    def resume(self) -> bool:
        """Restarts monitoring for a session left active by a previous run."""
        if self.sessions.resume_session():
            self.start_monitoring()
            return True
        return False

    # === Ticks ===

    def perform_focus_tick(self) -> Optional[FocusAnalysis]:
        session = self.store.session_state()
        if not session.is_running:
            logger.debug("Session not active, skipping analysis")
            return None

        session_id = session.session_id
        now = self.clock()
        metrics = self.store.focus_metrics()

        request = FocusAnalysisRequest(
            current_url=metrics.active_url or "",
            tab_switch_count=metrics.tab_switch_count,
            time_on_current_site=self.monitor.time_on_current_site(metrics),
            session_duration=max(0.0, now - (session.start_time or now)),
            distraction_site_visits=session.distraction_count,
            recent_urls=[metrics.active_url] if metrics.active_url else [],
        )
        analysis = self.scorer.score(request)

        self.store.merge(config.FOCUS_METRICS, {
            'distraction_score': analysis.focus_score / 100,
            'last_analysis': {**analysis.to_dict(), 'timestamp': now},
        })

        score = self.sessions.update_focus_score(analysis.focus_score, session_id)
        if score is None:
            return analysis
        logger.info(f"Focus tick: raw {analysis.focus_score:g}, smoothed {score:.1f}")

        if self.monitor.check_inactivity():
            if self.sessions.pause():
                self.notifier.come_back()
            self.monitor.reset_tab_switch_count()
            return analysis

        if score > config.FOCUSED_TICK_THRESHOLD:
            self.sessions.record_focused_tick(self.focus_interval, session_id)
            self.growth.tick(session_id)

        self._check_wildfire(score, session_id, now)
        self.monitor.reset_tab_switch_count()
        return analysis

    def _check_wildfire(self, score: float, session_id: str, now: float) -> None:
        wildfire = self.wildfire.get_wildfire()
        if self.low_focus.observe(score, now):
            if not wildfire.active and self.wildfire.start_wildfire(session_id):
                self.notifier.wildfire_alert()
        elif wildfire.active and score > config.WILDFIRE_EXTINGUISH_THRESHOLD:
            if self.wildfire.stop_wildfire() is not None:
                self.wildfire.recover_trees()
                self.notifier.fire_contained()

    def wildfire_tick(self) -> None:
        session = self.store.session_state()
        if not session.active:
            return
        if self.wildfire.update_wildfire(session.session_id) is None:
            self.wildfire.recover_trees()

    def idle_check(self) -> None:
        session = self.store.session_state()
        if not session.is_running:
            return
        if self.monitor.check_inactivity() and self.sessions.pause():
            self.notifier.come_back()

    # === Event handlers ===

    def handle_activity(self, event_type: str, data: Optional[Dict[str, Any]] = None,
                        timestamp: Optional[float] = None) -> None:
        self.monitor.record_activity(ActivityEvent(type=event_type, timestamp=timestamp or self.clock(),
                                                   data=data))
        self.sessions.touch_activity()

    def handle_tab_change(self, tab_id: Optional[int], url: str) -> bool:
        """
        Records a tab/URL change. Arriving on an enabled distraction site
        (from another domain) counts a distraction and applies its penalty.
        """
        previous_domain = extract_domain(self.store.focus_metrics().active_url)
        domain = extract_domain(url)
        switched = self.monitor.record_tab_change(tab_id, url)
        self.sessions.touch_activity()

        if domain != previous_domain or domain is None:
            site = find_distraction_site(self.store, domain)
            if site is not None:
                new_score = self.sessions.apply_distraction_penalty(site.penalty)
                if new_score is not None:
                    logger.info(f"Distraction site {site.domain}, focus score now {new_score:.1f}")

        self._warm_classification(url)
        return switched

    def handle_window_focus(self, focused: bool) -> None:
        self.monitor.record_window_focus(focused)
        if focused:
            self.handle_activity("tab_switch")

    def handle_idle_state(self, state: str) -> None:
        session = self.store.session_state()
        if not session.active:
            return
        if state in ("idle", "locked"):
            if self.sessions.pause():
                self.notifier.come_back()
        else:
            self.handle_activity("keyboard")

    def _warm_classification(self, url: str) -> None:
        """Classifies with the external provider off the tick path so ticks hit the cache."""
        if self.ai_provider is None:
            return
        executor = self.executor
        if executor is not None:
            try:
                self._track_future(executor.submit(self.classifier.classify, url))
                return
            except RuntimeError:
                pass
        self.classifier.classify(url)

    # === Provider checks ===

    def test_api(self) -> Dict[str, Any]:
        if self.ai_provider is None:
            return {'success': True,
                    'message': 'Using mock mode (no API key set). Set an API key to test.'}
        answer = self.ai_provider.test_connection()
        return {'success': True,
                'message': f'{type(self.ai_provider).__name__} is working!',
                'response': answer}

    def cleanup(self):
        self.stop_monitoring()
