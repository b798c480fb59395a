# models.py
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from ForestEngine.enums import GrowthStage, SessionStatus, TreeStatus, WildfireOutcome


def _known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Drops keys that are not fields of the dataclass (stale or derived values)."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class SessionState:
    """The sessionState document."""
    active: bool = False
    paused: bool = False
    session_id: str = ""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    focus_score: float = 100.0  # smoothed, 0-100
    focused_seconds: float = 0.0
    distraction_count: int = 0
    last_activity_timestamp: float = 0.0

    @property
    def focused_minutes(self) -> int:
        return int(self.focused_seconds // 60)

    @property
    def status(self) -> SessionStatus:
        if self.active:
            return SessionStatus.PAUSED if self.paused else SessionStatus.ACTIVE
        if self.end_time is not None:
            return SessionStatus.ENDED
        return SessionStatus.IDLE

    @property
    def is_running(self) -> bool:
        """Active and not paused: the only state in which ticks mutate anything."""
        return self.active and not self.paused

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionState':
        return cls(**_known(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['focused_minutes'] = self.focused_minutes
        data['status'] = self.status.value
        return data


@dataclass
class Tree:
    """A single tree. x/y only feed the spread distance."""
    id: str
    type: str = 'row-1-column-1'
    height: float = 30.0
    age: int = 0  # ticks
    growth_stage: int = GrowthStage.SAPLING.value
    status: TreeStatus = TreeStatus.HEALTHY
    burn_intensity: Optional[float] = None  # 0-1, only while burning
    x: float = 0.0
    y: float = 0.0
    recovery: Optional[float] = None  # 0-1 regrown, only while recovering
    asset_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Tree':
        values = _known(cls, data)
        values['status'] = TreeStatus(values.get('status', TreeStatus.HEALTHY.value))
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data


@dataclass
class WildfireState:
    active: bool = False
    level: float = 0.0  # 0-1 severity
    affected_tree_ids: List[str] = field(default_factory=list)
    start_time: Optional[float] = None
    spreading_rate: float = 0.1
    outcome: Optional[WildfireOutcome] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WildfireState':
        values = _known(cls, data)
        outcome = values.get('outcome')
        values['outcome'] = WildfireOutcome(outcome) if outcome else None
        values['affected_tree_ids'] = list(values.get('affected_tree_ids') or [])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['outcome'] = self.outcome.value if self.outcome else None
        return data


@dataclass
class ForestState:
    """The forestState document."""
    trees: List[Tree] = field(default_factory=list)
    animals: List[Dict[str, Any]] = field(default_factory=list)
    wildfire: WildfireState = field(default_factory=WildfireState)
    session_active: bool = False
    session_id: str = ""
    last_update: float = 0.0

    def find_tree(self, tree_id: str) -> Optional[Tree]:
        for tree in self.trees:
            if tree.id == tree_id:
                return tree
        return None

    def trees_with_status(self, status: TreeStatus) -> List[Tree]:
        return [t for t in self.trees if t.status == status]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ForestState':
        values = _known(cls, data)
        values['trees'] = [Tree.from_dict(t) for t in values.get('trees') or []]
        values['animals'] = list(values.get('animals') or [])
        values['wildfire'] = WildfireState.from_dict(values.get('wildfire') or {})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trees': [t.to_dict() for t in self.trees],
            'animals': list(self.animals),
            'wildfire': self.wildfire.to_dict(),
            'session_active': self.session_active,
            'session_id': self.session_id,
            'last_update': self.last_update,
        }


@dataclass
class FocusMetrics:
    """Transient scoring state, the focusMetrics document."""
    active_url: Optional[str] = None
    active_tab_id: Optional[int] = None
    current_site_arrival_time: float = 0.0
    tab_switch_count: int = 0
    distraction_score: float = 1.0  # 0-1, lower = more distracted
    last_activity_timestamp: float = 0.0
    inactivity_duration: float = 0.0  # seconds
    window_focused: bool = True
    tab_visible: bool = True
    time_on_distracting_sites: float = 0.0  # seconds
    last_analysis: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FocusMetrics':
        return cls(**_known(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ActivityEvent:
    type: str
    timestamp: float
    data: Optional[Dict[str, Any]] = None


@dataclass
class WebsiteClassification:
    """A classification cache entry, keyed by domain."""
    url: str
    domain: str
    category: str  # productive | neutral | distracting
    score: float  # 0-100, higher = more productive
    reasoning: str = ""
    timestamp: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WebsiteClassification':
        return cls(**_known(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DistractionSite:
    domain: str
    enabled: bool = True
    penalty: float = 0.1  # 0-1, how much it knocks off the focus score

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DistractionSite':
        return cls(**_known(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class APIConfig:
    provider: str = "mock"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    use_cache: bool = True
    timeout: int = 30

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'APIConfig':
        return cls(**_known(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FocusAnalysisRequest:
    """Signals handed to a focus scoring strategy."""
    current_url: str = ""
    tab_switch_count: int = 0
    time_on_current_site: float = 0.0  # seconds
    session_duration: float = 0.0  # seconds
    distraction_site_visits: int = 0
    recent_urls: List[str] = field(default_factory=list)


@dataclass
class FocusAnalysis:
    focus_score: float
    distraction_level: str  # low | medium | high
    reasoning: str = ""
    suggestions: List[str] = field(default_factory=list)
    source: str = "heuristic"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
