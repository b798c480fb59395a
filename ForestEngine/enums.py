from enum import Enum


class SessionStatus(Enum):
    """Lifecycle states of a focus session"""
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class SessionEvent(Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    END = "end"


class TreeStatus(Enum):
    """Per-tree fire states"""
    HEALTHY = "healthy"
    BURNING = "burning"
    BURNT = "burnt"
    RECOVERING = "recovering"


class GrowthStage(Enum):
    SAPLING = 0
    YOUNG = 1
    MATURE = 2
    FULL = 3


class WildfireOutcome(Enum):
    """How a wildfire went dormant"""
    EXTINGUISHED = "extinguished"
    BURNED_OUT = "burned_out"


class ActivityType(Enum):
    KEYBOARD = "keyboard"
    MOUSE = "mouse"
    SCROLL = "scroll"
    TAB_SWITCH = "tab_switch"
    URL_CHANGE = "url_change"


class TabSwitchPolicy(Enum):
    """When the tab switch counter is cleared"""
    PER_TICK = "per_tick"
    PER_SESSION = "per_session"
