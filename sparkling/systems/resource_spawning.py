"""Resource spawning system.

Each tick every cell independently receives resources with probability
``(base_rate + per_sparkling_rate × population) × dt``; the amounts are
weighted by the cell's terrain multipliers. A negative per-sparkling rate
makes crowded worlds regrow more slowly, floored at zero.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict

from sparkling.systems.base import BaseSystem, SystemResult

if TYPE_CHECKING:
    from sparkling.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)


class ResourceSpawningSystem(BaseSystem):
    """Regrows food and neural energy across the grid."""

    def __init__(self, engine: "SimulationEngine") -> None:
        super().__init__(engine, "ResourceSpawning")
        self._total_cells_spawned = 0

    def _do_update(self, dt: float) -> SystemResult:
        population = self._engine.live_count()
        cells = self._engine.world.spawn_resources(dt, population)
        self._total_cells_spawned += cells
        return SystemResult(details={"cells_spawned": cells})

    def get_debug_info(self) -> Dict[str, Any]:
        info = super().get_debug_info()
        info["total_cells_spawned"] = self._total_cells_spawned
        return info
