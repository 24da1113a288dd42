"""Population control and removal of faded sparklings.

This system is the only place sparklings leave the simulation. Each tick it:

1. removes sparklings whose fade-out has completed;
2. when auto control is on, nudges the live count back into
   ``[min_count, max_count]``: one replacement is spawned per tick while
   below the minimum, and the weakest sparkling is sent fading while above
   the maximum.

Replacement inheritance: a replacement's parameters are the 50/50 blend of
the two fittest live sparklings (highest combined resource ratio), varied
by ±10%. With fewer than two live sparklings it falls back to a randomized
preset of a random profile.
"""

import logging
import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from sparkling.config import population as population_defaults
from sparkling.config.simulation_config import PopulationConfig
from sparkling.parameters import (
    BehavioralProfile,
    DecisionParameters,
    blend,
    for_profile,
    random_profile,
    randomized,
)
from sparkling.systems.base import BaseSystem, SystemResult

if TYPE_CHECKING:
    from sparkling.entities.sparkling import Sparkling
    from sparkling.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)


def fittest(sparklings: List["Sparkling"], count: int) -> List["Sparkling"]:
    """The ``count`` live sparklings with the highest combined resource ratio."""
    live = [s for s in sparklings if s.is_active()]
    return sorted(live, key=lambda s: s.fitness(), reverse=True)[:count]


def weakest(sparklings: List["Sparkling"]) -> Optional["Sparkling"]:
    live = [s for s in sparklings if s.is_active()]
    if not live:
        return None
    return min(live, key=lambda s: s.fitness())


def inherit_parameters(
    sparklings: List["Sparkling"], rng: random.Random
) -> Tuple[BehavioralProfile, DecisionParameters]:
    """Profile and parameters for a replacement sparkling."""
    parents = fittest(sparklings, 2)
    if len(parents) < 2:
        profile = random_profile(rng)
        return profile, randomized(for_profile(profile), population_defaults.PROFILE_VARIATION, rng)

    mother, father = parents
    child = blend(mother.parameters, father.parameters, population_defaults.REPLACEMENT_BLEND_RATIO)
    child = randomized(child, population_defaults.REPLACEMENT_VARIATION, rng)
    return mother.profile, child


class PopulationSystem(BaseSystem):
    """Keeps the population within bounds and removes faded sparklings."""

    def __init__(
        self,
        engine: "SimulationEngine",
        config: Optional[PopulationConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(engine, "Population")
        self.config = config or PopulationConfig()
        self._rng = rng or random.Random()
        self._total_removed = 0
        self._total_spawned = 0
        self._total_culled = 0

    def _do_update(self, dt: float) -> SystemResult:
        removed = self._remove_faded()
        spawned = 0
        culled = 0

        if self.config.auto_control:
            live = self._engine.live_count()
            if live < self.config.min_count:
                spawned = self._spawn_replacement()
            elif live > self.config.max_count:
                culled = self._cull_weakest()

        return SystemResult(
            entities_spawned=spawned,
            entities_removed=removed,
            entities_affected=culled,
            details={"removed": removed, "spawned": spawned, "culled": culled},
        )

    def _remove_faded(self) -> int:
        removed = 0
        for sparkling in list(self._engine.sparklings):
            if sparkling.ready_for_removal:
                self._engine.remove_sparkling(sparkling.id)
                removed += 1
        self._total_removed += removed
        return removed

    def _spawn_replacement(self) -> int:
        profile, parameters = inherit_parameters(self._engine.sparklings, self._rng)
        sparkling = self._engine.spawn_sparkling(profile=profile, parameters=parameters)
        self._total_spawned += 1
        logger.info(
            "Population below minimum (%d); spawned replacement sparkling %d (%s)",
            self.config.min_count,
            sparkling.id,
            profile.value,
        )
        return 1

    def _cull_weakest(self) -> int:
        if not self.config.fadeout_enabled:
            return 0
        victim = weakest(self._engine.sparklings)
        if victim is None or not victim.begin_fade("population control"):
            return 0
        self._total_culled += 1
        return 1

    def get_debug_info(self) -> Dict[str, Any]:
        info = super().get_debug_info()
        info.update(
            {
                "total_removed": self._total_removed,
                "total_spawned": self._total_spawned,
                "total_culled": self._total_culled,
                "min_count": self.config.min_count,
                "max_count": self.config.max_count,
            }
        )
        return info
