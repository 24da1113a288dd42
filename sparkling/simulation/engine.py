"""Headless simulation engine - the tick loop.

The engine coordinates; it holds no behavior rules of its own. Each call
to :meth:`SimulationEngine.update` runs, in order:

    1. advance the world clock
    2. spawn resources (ResourceSpawningSystem)
    3. update every sparkling in index order
    4. resolve encounters and contests (CompetitionSystem)
    5. remove faded sparklings and control the population (PopulationSystem)

Inference results are never applied here. Each sparkling drains its own
pending result during step 3, so parameter updates always happen on the
simulation thread at a fixed point of the tick.
"""

import json
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sparkling.config import engine as engine_defaults
from sparkling.config import population as population_defaults
from sparkling.config.simulation_config import SimulationConfig
from sparkling.entities.sparkling import Sparkling
from sparkling.exceptions import SimulationError
from sparkling.inference.service import InferenceService
from sparkling.math_utils import Vector2
from sparkling.parameters import BehavioralProfile, DecisionParameters, random_profile
from sparkling.state_machine import BehaviorState
from sparkling.systems.base import BaseSystem, SystemResult
from sparkling.systems.competition import CompetitionSystem
from sparkling.systems.population import PopulationSystem
from sparkling.systems.resource_spawning import ResourceSpawningSystem
from sparkling.world import World

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """What happened during one tick.

    Attributes:
        tick: Tick number (1-based)
        time: Simulation time after the tick
        dt: Step actually applied (after clamping)
        population: Sparklings present after the tick, fading ones included
        live: Sparklings that are not fading
        systems: Result of each system by name
        errors: Ids of sparklings whose update raised
    """

    tick: int
    time: float
    dt: float
    population: int
    live: int
    systems: Dict[str, SystemResult] = field(default_factory=dict)
    errors: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "time": self.time,
            "dt": self.dt,
            "population": self.population,
            "live": self.live,
            "systems": {name: result.details for name, result in self.systems.items()},
            "errors": list(self.errors),
        }


class SimulationEngine:
    """Owns the world, the sparklings, the systems and the inference service.

    Attributes:
        config: Aggregate simulation configuration
        world: The resource grid
        service: Inference service shared by all sparklings
        tick_count: Ticks run so far
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        *,
        service: Optional[InferenceService] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        if seed is None:
            seed = self.config.seed

        if rng is not None:
            self.rng = rng
            self.seed = None
        elif seed is not None:
            self.rng = random.Random(seed)
            self.seed = seed
        else:
            self.rng = random.Random()
            self.seed = None

        self.world = World(self.config.world, rng=self.rng)
        self._owns_service = service is None
        self.service = service if service is not None else InferenceService(self.config.inference)

        self._sparklings: List[Sparkling] = []
        self._next_id = 1
        self._systems: List[BaseSystem] = []
        self.tick_count = 0
        self.start_time = time.time()
        self._is_setup = False

        self.resource_spawning_system = ResourceSpawningSystem(self)
        self.competition_system = CompetitionSystem(self, self.config.competition)
        self.population_system = PopulationSystem(self, self.config.population, rng=self.rng)

    # =========================================================================
    # Setup
    # =========================================================================

    def setup(self) -> None:
        """Validate configuration, generate the world and create the initial population.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config.validate()
        self.world.initialize()
        self._sparklings = []
        self._next_id = 1
        self.tick_count = 0
        self.start_time = time.time()

        self._systems = [
            self.resource_spawning_system,
            self.competition_system,
            self.population_system,
        ]

        for _ in range(self.config.population.initial_count):
            self.spawn_sparkling()
        self._is_setup = True
        logger.info(
            "Simulation ready: %d sparklings, inference strategy %s",
            len(self._sparklings),
            self.service.strategy_name,
        )

    @property
    def is_setup(self) -> bool:
        return self._is_setup

    # =========================================================================
    # Sparklings
    # =========================================================================

    @property
    def sparklings(self) -> List[Sparkling]:
        return self._sparklings

    def live_count(self) -> int:
        return sum(1 for s in self._sparklings if s.is_active())

    def get_sparkling(self, sparkling_id: int) -> Optional[Sparkling]:
        for sparkling in self._sparklings:
            if sparkling.id == sparkling_id:
                return sparkling
        return None

    def random_spawn_position(self) -> Vector2:
        margin = population_defaults.SPAWN_MARGIN
        width = max(self.world.pixel_width - 2 * margin, 1.0)
        height = max(self.world.pixel_height - 2 * margin, 1.0)
        return Vector2(margin + self.rng.random() * width, margin + self.rng.random() * height)

    def spawn_sparkling(
        self,
        profile: Optional[BehavioralProfile] = None,
        parameters: Optional[DecisionParameters] = None,
        position: Optional[Vector2] = None,
    ) -> Sparkling:
        """Create a sparkling and append it to the population."""
        if profile is None:
            profile = random_profile(self.rng)
        if position is None:
            position = self.random_spawn_position()
        sparkling = Sparkling(
            self._next_id,
            position,
            self.world,
            rng=self.rng,
            config=self.config,
            profile=profile,
            service=self.service,
            parameters=parameters,
        )
        self._next_id += 1
        self._sparklings.append(sparkling)
        logger.debug("Spawned sparkling %d (%s)", sparkling.id, profile.value)
        return sparkling

    def remove_sparkling(self, sparkling_id: int) -> bool:
        sparkling = self.get_sparkling(sparkling_id)
        if sparkling is None:
            return False
        sparkling.inference.abandon()
        self._sparklings.remove(sparkling)
        logger.debug("Removed sparkling %d", sparkling_id)
        return True

    # =========================================================================
    # Systems
    # =========================================================================

    def get_systems(self) -> List[BaseSystem]:
        return list(self._systems)

    def get_system(self, name: str) -> Optional[BaseSystem]:
        for system in self._systems:
            if system.name == name:
                return system
        return None

    def set_system_enabled(self, name: str, enabled: bool) -> bool:
        system = self.get_system(name)
        if system is None:
            return False
        system.enabled = enabled
        return True

    def get_systems_debug_info(self) -> Dict[str, Any]:
        return {system.name: system.get_debug_info() for system in self._systems}

    # =========================================================================
    # Tick
    # =========================================================================

    def update(self, dt: float = engine_defaults.DEFAULT_TICK_DT) -> TickResult:
        """Advance the simulation by ``dt`` seconds.

        Raises:
            SimulationError: If ``dt`` is negative or :meth:`setup` was never called
        """
        if not self._is_setup:
            raise SimulationError("SimulationEngine.update() called before setup()")
        if dt < 0:
            raise SimulationError(f"dt must not be negative, got {dt}")
        dt = min(dt, engine_defaults.MAX_TICK_DT)

        self.tick_count += 1
        self.world.advance_time(dt)
        now = self.world.current_time

        result = TickResult(tick=self.tick_count, time=now, dt=dt, population=0, live=0)
        result.systems[self.resource_spawning_system.name] = self.resource_spawning_system.update(dt)

        for sparkling in list(self._sparklings):
            try:
                sparkling.update(dt, now)
            except Exception:
                logger.exception("Sparkling %d update failed at t=%.2f", sparkling.id, now)
                result.errors.append(sparkling.id)

        result.systems[self.competition_system.name] = self.competition_system.update(dt)
        result.systems[self.population_system.name] = self.population_system.update(dt)

        result.population = len(self._sparklings)
        result.live = self.live_count()
        return result

    def run(self, ticks: int, dt: float = engine_defaults.DEFAULT_TICK_DT) -> Dict[str, Any]:
        """Run ``ticks`` updates (calling :meth:`setup` first if needed) and return stats."""
        if not self._is_setup:
            self.setup()
        for _ in range(ticks):
            self.update(dt)
        return self.get_stats()

    # =========================================================================
    # Render boundary and statistics
    # =========================================================================

    def snapshot(self, include_cells: bool = True, include_memory: bool = False) -> Dict[str, Any]:
        """Read-only view of the whole simulation for rendering and the API."""
        snapshot: Dict[str, Any] = {
            "tick": self.tick_count,
            "time": self.world.current_time,
            "world": {
                "width": self.world.pixel_width,
                "height": self.world.pixel_height,
                "cell_size": self.world.config.cell_size,
                "grid_width": self.world.grid_width,
                "grid_height": self.world.grid_height,
            },
            "sparklings": [s.to_snapshot(include_memory=include_memory) for s in self._sparklings],
            "inference": self.service.metrics.to_dict(),
        }
        if include_cells:
            snapshot["world"]["terrain"] = self.world.terrain_rows()
            snapshot["world"]["cells"] = self.world.cell_snapshot()
        return snapshot

    def get_stats(self) -> Dict[str, Any]:
        live = [s for s in self._sparklings if s.is_active()]
        states = {state.value: 0 for state in BehaviorState}
        for sparkling in self._sparklings:
            states[sparkling.state.value] += 1
        return {
            "tick": self.tick_count,
            "time": self.world.current_time,
            "population": len(self._sparklings),
            "live": len(live),
            "states": states,
            "average_food_ratio": sum(s.food_ratio for s in live) / len(live) if live else 0.0,
            "average_energy_ratio": sum(s.energy_ratio for s in live) / len(live) if live else 0.0,
            "world_food": self.world.total_food(),
            "world_neural_energy": self.world.total_neural_energy(),
            "territories": sum(1 for s in live if s.territory is not None),
            "inference": self.service.metrics.to_dict(),
            "systems": self.get_systems_debug_info(),
        }

    def export_stats_json(self, filename: str) -> None:
        """Write :meth:`get_stats` plus wall-clock elapsed time to ``filename``."""
        stats = self.get_stats()
        stats["elapsed_time"] = time.time() - self.start_time
        with open(filename, "w") as f:
            json.dump(stats, f, indent=2)
        logger.info("Exported stats to %s", filename)

    # =========================================================================
    # Shutdown
    # =========================================================================

    def shutdown(self) -> None:
        """Stop the inference service if this engine created it."""
        for sparkling in self._sparklings:
            sparkling.inference.abandon()
        if self._owns_service:
            self.service.shutdown()

    def __enter__(self) -> "SimulationEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
