import logging
import time
from typing import Callable, Optional

import config
from models import FocusMetrics, SessionState
from utils import clamp, generate_id

from .enums import SessionEvent, SessionStatus
from .transitions import InvalidTransitionError, next_session_status

logger = logging.getLogger(__name__)


def smooth_focus_score(current: float, raw: float) -> float:
    """
    Asymmetric exponential smoothing: a better sample is followed almost
    immediately, a worse one only pulls the score part of the way down.
    """
    raw = clamp(raw, 0, 100)
    if raw > current:
        smoothed = current * config.RECOVERY_WEIGHT_CURRENT + raw * (1 - config.RECOVERY_WEIGHT_CURRENT)
    else:
        smoothed = current * config.DECLINE_WEIGHT_CURRENT + raw * (1 - config.DECLINE_WEIGHT_CURRENT)
    return clamp(smoothed, 0, 100)


class SessionManager:
    """Owns the session state machine: idle -> active <-> paused -> ended."""

    def __init__(self, store, growth_engine, clock: Callable[[], float] = time.time,
                 id_factory: Callable[[], str] = generate_id):
        self.store = store
        self.growth_engine = growth_engine
        self.clock = clock
        self.id_factory = id_factory

    def get_session(self) -> SessionState:
        return self.store.session_state()

    def status(self) -> SessionStatus:
        return self.get_session().status

    # === Commands ===

    def start_session(self) -> str:
        """Idle/ended -> active. Resets metrics and plants a fresh forest."""
        session_id = self.id_factory()
        now = self.clock()

        def _start(current):
            next_session_status(SessionState.from_dict(current).status, SessionEvent.START)
            return SessionState(
                active=True,
                paused=False,
                session_id=session_id,
                start_time=now,
                focus_score=100.0,
                last_activity_timestamp=now,
            ).to_dict()

        self.store.update(config.SESSION_STATE, _start)
        self.store.set(config.FOCUS_METRICS, FocusMetrics(
            last_activity_timestamp=now,
            current_site_arrival_time=now,
        ).to_dict())
        self.growth_engine.create_initial_forest(session_id)

        logger.info(f"Starting new session: {session_id}")
        return session_id

    def end_session(self) -> SessionState:
        """Active/paused -> ended. The forest is kept for display."""
        now = self.clock()

        def _end(current):
            session = SessionState.from_dict(current)
            next_session_status(session.status, SessionEvent.END)
            session.active = False
            session.paused = False
            session.end_time = now
            return session.to_dict()

        ended = SessionState.from_dict(self.store.update(config.SESSION_STATE, _end))

        def _retire_forest(forest):
            if forest.get('session_id') != ended.session_id:
                return None
            forest['session_active'] = False
            forest['last_update'] = now
            return forest

        self.store.update(config.FOREST_STATE, _retire_forest)
        logger.info(f"Session {ended.session_id} ended")
        return ended

    def resume_session(self) -> bool:
        """Picks up a session that was still active when the process stopped."""
        now = self.clock()

        def _resume(current):
            session = SessionState.from_dict(current)
            if not (session.active and session.start_time):
                return None
            session.last_activity_timestamp = now
            return session.to_dict()

        resumed = self.store.update(config.SESSION_STATE, _resume) is not None
        if resumed:
            metrics = self.store.focus_metrics()
            if metrics.active_tab_id is None:
                self.store.set(config.FOCUS_METRICS, FocusMetrics(
                    last_activity_timestamp=now, current_site_arrival_time=now
                ).to_dict())
            logger.info("Resumed active session")
        return resumed

    # === Idle handling ===

    def pause(self) -> bool:
        """Active -> paused. Returns False (no-op) from any other state."""
        return self._apply(SessionEvent.PAUSE, lambda s: setattr(s, 'paused', True))

    def resume(self) -> bool:
        """Paused -> active. Returns False (no-op) from any other state."""
        return self._apply(SessionEvent.RESUME, lambda s: setattr(s, 'paused', False))

    def touch_activity(self) -> bool:
        """
        Records user activity on the session. Any activity resumes a paused
        session; returns True when that happened.
        """
        now = self.clock()
        resumed = []

        def _touch(current):
            resumed.clear()
            session = SessionState.from_dict(current)
            if not session.active:
                return None
            session.last_activity_timestamp = now
            if session.paused:
                next_session_status(session.status, SessionEvent.RESUME)
                session.paused = False
                resumed.append(True)
            return session.to_dict()

        self.store.update(config.SESSION_STATE, _touch)
        if resumed:
            logger.info("Activity detected, session resumed")
        return bool(resumed)

    # === Tick updates ===

    def update_focus_score(self, raw: float, session_id: Optional[str] = None) -> Optional[float]:
        """
        Folds one raw score into the smoothed focus score. Only applies while
        the session is active and not paused; returns the new score or None.
        """
        def _update(current):
            session = SessionState.from_dict(current)
            if not session.is_running or (session_id and session.session_id != session_id):
                return None
            session.focus_score = smooth_focus_score(session.focus_score, raw)
            return session.to_dict()

        updated = self.store.update(config.SESSION_STATE, _update)
        if updated is None:
            logger.debug("Focus score update skipped, session not running")
            return None
        return updated['focus_score']

    def apply_distraction_penalty(self, penalty: float) -> Optional[float]:
        """Counts a distraction-site visit and knocks the score down immediately."""
        def _penalize(current):
            session = SessionState.from_dict(current)
            if not session.active:
                return None
            session.distraction_count += 1
            session.focus_score = clamp(session.focus_score - penalty * 100, 0, 100)
            return session.to_dict()

        updated = self.store.update(config.SESSION_STATE, _penalize)
        return updated['focus_score'] if updated else None

    def record_focused_tick(self, seconds: float, session_id: Optional[str] = None) -> bool:
        def _record(current):
            session = SessionState.from_dict(current)
            if not session.is_running or (session_id and session.session_id != session_id):
                return None
            session.focused_seconds += seconds
            return session.to_dict()

        return self.store.update(config.SESSION_STATE, _record) is not None

    def _apply(self, event: SessionEvent, mutate) -> bool:
        def _transition(current):
            session = SessionState.from_dict(current)
            try:
                next_session_status(session.status, event)
            except InvalidTransitionError:
                return None
            mutate(session)
            return session.to_dict()

        applied = self.store.update(config.SESSION_STATE, _transition) is not None
        if applied:
            logger.info(f"Session {event.value}d")
        return applied
