import logging
import random
import time
from typing import Callable, Optional

import config
from models import ForestState, SessionState, Tree
from utils import generate_id, random_between, random_tree_type

from .enums import GrowthStage, TreeStatus

logger = logging.getLogger(__name__)

MAX_HEIGHT = 200
GROWTH_RATE = 5
INITIAL_TREE_COUNT = 5
STARTER_HEIGHT_BAND = (15, 30)

# Layout of a typical 1920px wide canvas
FOREST_CENTER_X = 960
FOREST_SPREAD = 600
GROUND_Y = 200

STAGE_BANDS = (
    (30, GrowthStage.SAPLING),
    (50, GrowthStage.YOUNG),
    (75, GrowthStage.MATURE),
)


def growth_stage_for(height: float) -> GrowthStage:
    for upper, stage in STAGE_BANDS:
        if height < upper:
            return stage
    return GrowthStage.FULL


class ForestGrowthEngine:
    """Grows the forest on focused ticks: older trees get taller, a new sapling is planted."""

    def __init__(self, store, rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.time,
                 id_factory: Callable[[], str] = generate_id):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock
        self.id_factory = id_factory

    def new_sapling(self) -> Tree:
        height = random_between(self.rng, *STARTER_HEIGHT_BAND)
        return Tree(
            id=self.id_factory(),
            type=random_tree_type(self.rng),
            height=height,
            growth_stage=growth_stage_for(height).value,
            x=FOREST_CENTER_X - FOREST_SPREAD / 2 + random_between(self.rng, 0, FOREST_SPREAD),
            y=GROUND_Y,
        )

    def create_initial_forest(self, session_id: str, tree_count: int = INITIAL_TREE_COUNT) -> ForestState:
        """Replaces the forest with a fresh set of saplings bound to ``session_id``."""
        forest = ForestState(
            trees=[self.new_sapling() for _ in range(tree_count)],
            session_active=True,
            session_id=session_id,
            last_update=self.clock(),
        )
        self.store.set(config.FOREST_STATE, forest.to_dict())
        logger.info(f"Planted {tree_count} starter trees for session {session_id}")
        return forest

    def tick(self, session_id: Optional[str] = None) -> Optional[Tree]:
        """
        One growth step. Does nothing unless the session is active and not
        paused and the forest still belongs to it. Returns the planted sapling.
        """
        session = SessionState.from_dict(self.store.get(config.SESSION_STATE))
        if not session.is_running:
            logger.debug("Growth tick skipped, session not running")
            return None
        session_id = session_id or session.session_id
        if session.session_id != session_id:
            return None

        sapling = self.new_sapling()

        def _grow(current):
            forest = ForestState.from_dict(current)
            if not forest.session_active or forest.session_id != session_id:
                return None
            for tree in forest.trees:
                if tree.status in (TreeStatus.HEALTHY, TreeStatus.RECOVERING):
                    self.grow_tree(tree)
            forest.trees.append(sapling)
            forest.last_update = self.clock()
            return forest.to_dict()

        if self.store.update(config.FOREST_STATE, _grow) is None:
            logger.debug(f"Growth tick skipped, forest no longer belongs to {session_id}")
            return None
        logger.debug(f"Forest grew, planted tree {sapling.id}")
        return sapling

    @staticmethod
    def grow_tree(tree: Tree) -> None:
        tree.age += 1
        tree.height = min(MAX_HEIGHT, tree.height + GROWTH_RATE)
        tree.growth_stage = growth_stage_for(tree.height).value
