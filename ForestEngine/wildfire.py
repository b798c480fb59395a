"""
Wildfire simulation.

A fire is dormant until ignited on a random healthy tree. While active, every
tick raises its level and spreading rate by an escalation multiplier that
grows exponentially with the time the fire has been burning, spreads it to
healthy neighbours and burns the trees already on fire a little further.
Extinguishing it saves the lightly burnt trees, which then regrow over the
following recovery ticks. Fire never lowers a tree's height; a salvaged
tree tracks its regrowth in `recovery` instead.
"""

import logging
import math
import random
import time
from typing import Callable, List, Optional

import config
from models import ForestState, Tree, WildfireState
from utils import distance

from .enums import TreeStatus, WildfireOutcome
from .transitions import transition_tree

logger = logging.getLogger(__name__)

ESCALATION_FACTOR = 1.5
ESCALATION_WINDOW = 60  # seconds
BASE_LEVEL_STEP = 0.01
SPREAD_RADIUS = 50
BASE_SPREADING_RATE = 0.1
MAX_SPREADING_RATE = 10
SPREAD_CANDIDATE_FACTOR = 10
MAX_SPREAD_PROBABILITY = 0.95
BURN_RATE = 0.05
IGNITION_INTENSITY = 0.1
IGNITION_LEVEL = 0.1
SALVAGE_THRESHOLD = 0.7  # burn_intensity strictly below this is salvageable
RECOVERY_STEP = 0.1  # recovery fraction regained per tick
RECOVERY_COMPLETE = 0.9


def escalation_multiplier(elapsed: float) -> float:
    return ESCALATION_FACTOR ** (max(0.0, elapsed) / ESCALATION_WINDOW)


def spread_probability(dist: float, spreading_rate: float, radius: float = SPREAD_RADIUS) -> float:
    """Chance that a burning tree ignites a healthy one ``dist`` away. Zero beyond the radius."""
    if dist > radius:
        return 0.0
    distance_factor = (radius - dist) / radius
    return min(MAX_SPREAD_PROBABILITY, 0.5 + distance_factor * spreading_rate)


class LowFocusWatch:
    """Tracks how long the focus score has stayed below the ignition threshold."""

    def __init__(self, threshold: float = config.WILDFIRE_TRIGGER_THRESHOLD,
                 duration: float = config.WILDFIRE_TRIGGER_DURATION):
        self.threshold = threshold
        self.duration = duration
        self.low_since: Optional[float] = None

    def observe(self, score: float, now: float) -> bool:
        """Feeds one score sample; True once it has been low for the whole duration."""
        if score >= self.threshold:
            self.low_since = None
            return False
        if self.low_since is None:
            self.low_since = now
        return now - self.low_since >= self.duration

    def reset(self) -> None:
        self.low_since = None


class WildfireEngine:

    def __init__(self, store, rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.time):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock

    def get_wildfire(self) -> WildfireState:
        return self.store.forest_state().wildfire

    def start_wildfire(self, session_id: Optional[str] = None) -> Optional[str]:
        """
        Ignites a random healthy tree. No-op while a fire is already active or
        when there is nothing left to burn. Returns the ignited tree id.
        """
        ignited: List[str] = []

        def _ignite(current):
            ignited.clear()
            forest = ForestState.from_dict(current)
            if forest.wildfire.active or not self._owns(forest, session_id):
                return None
            healthy = forest.trees_with_status(TreeStatus.HEALTHY)
            if not healthy:
                return None

            tree = self.rng.choice(healthy)
            self._ignite_tree(tree)
            forest.wildfire = WildfireState(
                active=True,
                level=IGNITION_LEVEL,
                affected_tree_ids=[tree.id],
                start_time=self.clock(),
                spreading_rate=BASE_SPREADING_RATE,
            )
            forest.last_update = self.clock()
            ignited.append(tree.id)
            return forest.to_dict()

        if self.store.update(config.FOREST_STATE, _ignite) is None:
            logger.debug("Wildfire not started")
            return None
        logger.warning(f"Wildfire started at tree {ignited[0]}")
        return ignited[0]

    def update_wildfire(self, session_id: Optional[str] = None) -> Optional[WildfireState]:
        """One escalation tick. Returns the new wildfire state, or None while dormant."""
        def _escalate(current):
            forest = ForestState.from_dict(current)
            wildfire = forest.wildfire
            if not wildfire.active or not self._owns(forest, session_id):
                return None

            now = self.clock()
            multiplier = escalation_multiplier(now - (wildfire.start_time or now))
            wildfire.level = min(1.0, wildfire.level + BASE_LEVEL_STEP * multiplier)
            wildfire.spreading_rate = min(MAX_SPREADING_RATE, wildfire.spreading_rate * multiplier)

            burning = forest.trees_with_status(TreeStatus.BURNING)
            newly_ignited = self._spread(forest, burning, wildfire.spreading_rate)
            for tree_id in newly_ignited:
                if tree_id not in wildfire.affected_tree_ids:
                    wildfire.affected_tree_ids.append(tree_id)

            for tree in burning:
                intensity = min(1.0, (tree.burn_intensity or IGNITION_INTENSITY) + BURN_RATE * multiplier)
                if intensity >= 1.0:
                    transition_tree(tree, TreeStatus.BURNT)
                else:
                    tree.burn_intensity = intensity

            if not forest.trees_with_status(TreeStatus.BURNING):
                wildfire.active = False
                wildfire.level = 0.0
                wildfire.outcome = WildfireOutcome.BURNED_OUT

            forest.last_update = now
            return forest.to_dict()

        updated = self.store.update(config.FOREST_STATE, _escalate)
        if updated is None:
            return None
        wildfire = ForestState.from_dict(updated).wildfire
        if wildfire.outcome == WildfireOutcome.BURNED_OUT:
            logger.warning(f"Wildfire burned out, {len(wildfire.affected_tree_ids)} trees affected")
        return wildfire

    def stop_wildfire(self) -> Optional[ForestState]:
        """
        Extinguishes an active fire. Burning trees below the salvage threshold
        start recovering, the rest are lost. Heights are never lowered.
        """
        def _extinguish(current):
            forest = ForestState.from_dict(current)
            if not forest.wildfire.active:
                return None

            for tree in forest.trees_with_status(TreeStatus.BURNING):
                intensity = tree.burn_intensity or 0.0
                if intensity < SALVAGE_THRESHOLD:
                    transition_tree(tree, TreeStatus.RECOVERING)
                else:
                    transition_tree(tree, TreeStatus.BURNT)

            forest.wildfire = WildfireState(
                active=False,
                level=0.0,
                affected_tree_ids=[],
                spreading_rate=BASE_SPREADING_RATE,
                outcome=WildfireOutcome.EXTINGUISHED,
            )
            forest.last_update = self.clock()
            return forest.to_dict()

        updated = self.store.update(config.FOREST_STATE, _extinguish)
        if updated is None:
            return None
        forest = ForestState.from_dict(updated)
        logger.info(
            f"Wildfire extinguished, {len(forest.trees_with_status(TreeStatus.RECOVERING))} trees recovering"
        )
        return forest

    def recover_trees(self) -> List[str]:
        """Regrows recovering trees by one step. Returns the ids that are healthy again."""
        healed: List[str] = []

        def _recover(current):
            healed.clear()
            forest = ForestState.from_dict(current)
            recovering = forest.trees_with_status(TreeStatus.RECOVERING)
            if not recovering:
                return None
            for tree in recovering:
                tree.recovery = min(1.0, round((tree.recovery or 0.0) + RECOVERY_STEP, 6))
                if tree.recovery >= RECOVERY_COMPLETE:
                    transition_tree(tree, TreeStatus.HEALTHY)
                    healed.append(tree.id)
            forest.last_update = self.clock()
            return forest.to_dict()

        self.store.update(config.FOREST_STATE, _recover)
        if healed:
            logger.info(f"{len(healed)} trees recovered")
        return list(healed)

    def _spread(self, forest: ForestState, burning: List[Tree], spreading_rate: float) -> List[str]:
        """Nearest-first ignition of healthy neighbours. Mutates trees, returns new ids."""
        ignited: List[str] = []
        limit = math.ceil(spreading_rate * SPREAD_CANDIDATE_FACTOR)

        for source in burning:
            candidates = []
            for tree in forest.trees_with_status(TreeStatus.HEALTHY):
                dist = distance(source.x, source.y, tree.x, tree.y)
                if dist <= SPREAD_RADIUS:
                    candidates.append((dist, tree))
            candidates.sort(key=lambda pair: pair[0])

            for dist, tree in candidates[:limit]:
                if self.rng.random() < spread_probability(dist, spreading_rate):
                    self._ignite_tree(tree)
                    ignited.append(tree.id)
        return ignited

    @staticmethod
    def _ignite_tree(tree: Tree) -> None:
        transition_tree(tree, TreeStatus.BURNING)
        tree.burn_intensity = IGNITION_INTENSITY

    @staticmethod
    def _owns(forest: ForestState, session_id: Optional[str]) -> bool:
        if session_id is None:
            return True
        return forest.session_active and forest.session_id == session_id
