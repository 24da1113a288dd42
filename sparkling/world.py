"""World grid: terrain classification and per-cell resource quantities.

The world is pure data plus two kinds of mutators: collection (decrement)
and periodic spawning (increment, probabilistic, terrain weighted). No cell
quantity ever goes negative; ``collect_*`` never returns more than was
available and decreases the cell by exactly what it returns.

Coordinates:
    World coordinates are continuous (``0 <= x < width``). Grid coordinates
    are integer cell indices, ``gx = floor(x / cell_size)``.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from sparkling.config import world as world_defaults
from sparkling.config.simulation_config import WorldConfig
from sparkling.math_utils import Vector2
from sparkling.terrain import TERRAIN_PROPERTIES, TerrainProperties, TerrainType

logger = logging.getLogger(__name__)

_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class GridCell:
    """A single grid cell.

    Attributes:
        x: Grid column
        y: Grid row
        terrain: Terrain classification
        food: Food quantity (>= 0)
        neural_energy: Neural energy quantity (>= 0)
    """

    x: int
    y: int
    terrain: TerrainType = TerrainType.PLAIN
    food: float = 0.0
    neural_energy: float = 0.0

    @property
    def properties(self) -> TerrainProperties:
        return TERRAIN_PROPERTIES[self.terrain]

    def to_dict(self) -> Dict[str, object]:
        return {
            "x": self.x,
            "y": self.y,
            "terrain": self.terrain.value,
            "food": self.food,
            "neural_energy": self.neural_energy,
        }


class World:
    """The simulation world and its grid.

    Attributes:
        config: World dimensions and spawn configuration
        rng: Random source shared with the engine
    """

    def __init__(self, config: Optional[WorldConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or WorldConfig()
        self.rng = rng if rng is not None else random.Random()
        self.grid_width = self.config.grid_width
        self.grid_height = self.config.grid_height
        self._grid: List[List[GridCell]] = []
        self._time = 0.0
        self._build_empty_grid()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def initialize(self, *, seed_resources: bool = True) -> None:
        """Generate terrain and seed initial resources; resets the clock."""
        self._build_empty_grid()
        self._generate_terrain()
        if seed_resources:
            self._seed_resources()
        self._time = 0.0
        logger.info(
            "World initialized: %dx%d cells, food=%.0f, energy=%.0f",
            self.grid_width,
            self.grid_height,
            self.total_food(),
            self.total_neural_energy(),
        )

    def _build_empty_grid(self) -> None:
        self._grid = [
            [GridCell(x, y) for x in range(self.grid_width)] for y in range(self.grid_height)
        ]

    def _generate_terrain(self) -> None:
        cfg = self.config
        self._grow_clusters(TerrainType.WATER, cfg.water_percentage, world_defaults.WATER_CLUSTER_FACTOR)
        self._grow_clusters(
            TerrainType.MOUNTAIN, cfg.mountain_percentage, world_defaults.MOUNTAIN_CLUSTER_FACTOR
        )
        self._grow_clusters(TerrainType.FOREST, cfg.forest_percentage, world_defaults.FOREST_CLUSTER_FACTOR)
        self._grow_clusters(TerrainType.DESERT, cfg.desert_percentage, world_defaults.DESERT_CLUSTER_FACTOR)

    def _grow_clusters(self, terrain: TerrainType, percentage: float, cluster_factor: float) -> None:
        """Place seed cells of ``terrain`` on plains and grow them outward."""
        target = int(self.grid_width * self.grid_height * percentage)
        if target <= 0:
            return
        placed = 0
        seeds: List[Tuple[int, int]] = []

        for _ in range(max(1, int(target * 0.1))):
            x = self.rng.randrange(self.grid_width)
            y = self.rng.randrange(self.grid_height)
            cell = self._grid[y][x]
            if cell.terrain is TerrainType.PLAIN:
                cell.terrain = terrain
                seeds.append((x, y))
                placed += 1

        while placed < target and seeds:
            index = self.rng.randrange(len(seeds))
            sx, sy = seeds[index]
            directions = list(_NEIGHBOR_OFFSETS)
            self.rng.shuffle(directions)

            expanded = False
            for dx, dy in directions:
                nx, ny = sx + dx, sy + dy
                if not (0 <= nx < self.grid_width and 0 <= ny < self.grid_height):
                    continue
                neighbor = self._grid[ny][nx]
                if neighbor.terrain is TerrainType.PLAIN and self.rng.random() < cluster_factor:
                    neighbor.terrain = terrain
                    seeds.append((nx, ny))
                    placed += 1
                    expanded = True
                    break

            if not expanded:
                seeds.pop(index)

    def _seed_resources(self) -> None:
        for cell in self.iter_cells():
            props = cell.properties
            if self.rng.random() < world_defaults.INITIAL_FOOD_CHANCE * props.food_multiplier:
                cell.food = float(
                    math.ceil(self.rng.random() * world_defaults.INITIAL_FOOD_SCALE * props.food_multiplier)
                )
            if self.rng.random() < world_defaults.INITIAL_ENERGY_CHANCE * props.energy_multiplier:
                cell.neural_energy = float(
                    math.ceil(
                        self.rng.random() * world_defaults.INITIAL_ENERGY_SCALE * props.energy_multiplier
                    )
                )

    # ------------------------------------------------------------------
    # Time and spawning
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> float:
        """Simulation time in seconds."""
        return self._time

    def advance_time(self, dt: float) -> None:
        self._time += dt

    def spawn_chance(self, dt: float, population: int = 0) -> float:
        """Per-cell spawn probability for this tick (never negative)."""
        rate = self.config.resource_spawn_rate + self.config.resource_spawn_rate_per_sparkling * population
        return max(0.0, rate) * dt

    def spawn_resources(self, dt: float, population: int = 0) -> int:
        """Probabilistically add resources to cells, weighted by terrain.

        Returns:
            Number of cells that received any resource
        """
        chance = self.spawn_chance(dt, population)
        if chance <= 0:
            return 0

        spawned = 0
        for cell in self.iter_cells():
            if self.rng.random() >= chance:
                continue
            props = cell.properties
            touched = False
            if self.rng.random() < props.food_multiplier:
                cell.food += math.ceil(self.rng.random() * world_defaults.SPAWN_FOOD_SCALE * props.food_multiplier)
                touched = True
            if self.rng.random() < props.energy_multiplier:
                cell.neural_energy += math.ceil(
                    self.rng.random() * world_defaults.SPAWN_ENERGY_SCALE * props.energy_multiplier
                )
                touched = True
            spawned += int(touched)
        return spawned

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def pixel_width(self) -> float:
        return float(self.grid_width * self.config.cell_size)

    @property
    def pixel_height(self) -> float:
        return float(self.grid_height * self.config.cell_size)

    def cell_at(self, gx: int, gy: int) -> Optional[GridCell]:
        """Cell by grid coordinates, or None when out of range."""
        if 0 <= gx < self.grid_width and 0 <= gy < self.grid_height:
            return self._grid[gy][gx]
        return None

    def get_cell(self, x: float, y: float) -> Optional[GridCell]:
        """Cell containing the world position ``(x, y)``, or None outside the world."""
        size = self.config.cell_size
        return self.cell_at(math.floor(x / size), math.floor(y / size))

    def terrain_properties_at(self, x: float, y: float) -> Optional[TerrainProperties]:
        cell = self.get_cell(x, y)
        return cell.properties if cell is not None else None

    def cell_center(self, cell: GridCell) -> Vector2:
        half = self.config.cell_size / 2
        return Vector2(cell.x * self.config.cell_size + half, cell.y * self.config.cell_size + half)

    def cells_in_radius(self, position: Vector2, radius_cells: int) -> Iterator[Tuple[GridCell, float]]:
        """Yield ``(cell, distance_in_cells)`` for cells within a circular cell radius."""
        size = self.config.cell_size
        for dy in range(-radius_cells, radius_cells + 1):
            for dx in range(-radius_cells, radius_cells + 1):
                distance = math.sqrt(dx * dx + dy * dy)
                if distance > radius_cells:
                    continue
                cell = self.get_cell(position.x + dx * size, position.y + dy * size)
                if cell is not None:
                    yield cell, distance

    def clamp_position(self, position: Vector2) -> None:
        """Clamp a position into world bounds in place."""
        position.x = max(0.0, min(self.pixel_width - 1, position.x))
        position.y = max(0.0, min(self.pixel_height - 1, position.y))

    def iter_cells(self) -> Iterator[GridCell]:
        for row in self._grid:
            yield from row

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect_food(self, x: float, y: float, amount: float) -> float:
        """Withdraw up to ``amount`` food from the cell at ``(x, y)``."""
        cell = self.get_cell(x, y)
        if cell is None or cell.food <= 0 or amount <= 0:
            return 0.0
        collected = min(cell.food, amount)
        cell.food -= collected
        return collected

    def collect_neural_energy(self, x: float, y: float, amount: float) -> float:
        """Withdraw up to ``amount`` neural energy from the cell at ``(x, y)``."""
        cell = self.get_cell(x, y)
        if cell is None or cell.neural_energy <= 0 or amount <= 0:
            return 0.0
        collected = min(cell.neural_energy, amount)
        cell.neural_energy -= collected
        return collected

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def total_food(self) -> float:
        return sum(cell.food for cell in self.iter_cells())

    def total_neural_energy(self) -> float:
        return sum(cell.neural_energy for cell in self.iter_cells())

    def cell_snapshot(self, include_empty: bool = False) -> List[Dict[str, object]]:
        """Cells as plain dicts for the render boundary."""
        return [
            cell.to_dict()
            for cell in self.iter_cells()
            if include_empty or cell.food > 0 or cell.neural_energy > 0
        ]

    def terrain_rows(self) -> List[List[str]]:
        """Terrain kind per cell, row major."""
        return [[cell.terrain.value for cell in row] for row in self._grid]
