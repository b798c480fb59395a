import time
from collections import Counter
from typing import Any, Dict, Optional

from ForestEngine.enums import TreeStatus
from models import ForestState, SessionState
from utils import format_minutes


class SessionAnalytics:
    """Provides statistics about the current (or last) session and its forest."""

    def __init__(self, store, clock=time.time):
        self.store = store
        self.clock = clock

    def get_session_duration(self, session: Optional[SessionState] = None) -> float:
        """Seconds since the session started; frozen at end_time once it has ended."""
        session = session or self.store.session_state()
        if not session.start_time:
            return 0.0
        end = session.end_time if session.end_time is not None and not session.active else self.clock()
        return max(0.0, end - session.start_time)

    def get_tree_counts(self, forest: Optional[ForestState] = None) -> Dict[str, int]:
        forest = forest or self.store.forest_state()
        counts = Counter(tree.status.value for tree in forest.trees)
        return {status.value: counts.get(status.value, 0) for status in TreeStatus}

    def get_forest_health(self, forest: Optional[ForestState] = None) -> float:
        """Share of trees that are healthy or recovering, 0-1. An empty forest counts as healthy."""
        forest = forest or self.store.forest_state()
        if not forest.trees:
            return 1.0
        alive = sum(1 for t in forest.trees if t.status in (TreeStatus.HEALTHY, TreeStatus.RECOVERING))
        return alive / len(forest.trees)

    def get_session_stats(self) -> Dict[str, Any]:
        session = self.store.session_state()
        forest = self.store.forest_state()
        counts = self.get_tree_counts(forest)

        return {
            'session_id': session.session_id,
            'status': session.status.value,
            'duration_seconds': self.get_session_duration(session),
            'focus_score': round(session.focus_score),
            'focused_minutes': session.focused_minutes,
            'focused_time': format_minutes(session.focused_minutes),
            'distraction_count': session.distraction_count,
            'trees_total': len(forest.trees),
            'trees_grown': counts[TreeStatus.HEALTHY.value],
            'trees_burning': counts[TreeStatus.BURNING.value],
            'trees_burned': counts[TreeStatus.BURNT.value],
            'trees_recovering': counts[TreeStatus.RECOVERING.value],
            'forest_health': round(self.get_forest_health(forest), 2),
            'wildfire_active': forest.wildfire.active,
            'wildfire_level': forest.wildfire.level,
        }
