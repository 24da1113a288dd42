"""Perception component: periodic surroundings scans and target resolution."""

import logging
import math
import random
from typing import Optional, Tuple

from sparkling.config import sparklings as sparkling_defaults
from sparkling.math_utils import Vector2
from sparkling.memory import MemoryEventType, MemoryStore
from sparkling.parameters import DecisionParameters
from sparkling.protocols import WorldView

logger = logging.getLogger(__name__)


def effective_sensor_radius(base_radius: float, params: DecisionParameters) -> float:
    """Sensor radius widened or narrowed by ``exploration_range`` around its base value."""
    base_range = sparkling_defaults.BASE_EXPLORATION_RANGE
    return base_radius * (1 + (params.exploration_range - base_range) / base_range)


def resource_preferences(params: DecisionParameters) -> Tuple[float, float]:
    """Scoring weights ``(food, energy)`` derived from ``resource_preference``."""
    food_pref = 1.0
    energy_pref = 1.0
    if params.resource_preference < 0:
        energy_pref = 1.0 + params.resource_preference
    elif params.resource_preference > 0:
        food_pref = 1.0 - params.resource_preference
    return food_pref, energy_pref


class PerceptionComponent:
    """Senses the world around a sparkling and feeds its memory.

    Attributes:
        sensor_radius: Base sensing radius in world units
    """

    def __init__(self, world: WorldView, memory: MemoryStore, rng: random.Random, cell_size: float) -> None:
        self._world = world
        self._memory = memory
        self._rng = rng
        self._cell_size = cell_size
        self.sensor_radius = cell_size * sparkling_defaults.SENSOR_RADIUS_CELLS
        self._last_resource_check = 0.0
        self._last_terrain_check = 0.0

    def radius_in_cells(self, params: DecisionParameters) -> int:
        return max(0, math.floor(effective_sensor_radius(self.sensor_radius, params) / self._cell_size))

    def update(self, now: float, position: Vector2, params: DecisionParameters) -> None:
        """Run the resource and terrain scans when their intervals have elapsed.

        Intervals shrink as ``memory_trust_factor`` grows.
        """
        trust = params.memory_trust_factor
        if now - self._last_resource_check > sparkling_defaults.RESOURCE_CHECK_INTERVAL / trust:
            self._last_resource_check = now
            self.record_visible_resources(position, params)
        if now - self._last_terrain_check > sparkling_defaults.TERRAIN_CHECK_INTERVAL / trust:
            self._last_terrain_check = now
            self.record_terrain(position)

    def record_visible_resources(self, position: Vector2, params: DecisionParameters) -> int:
        """Write found-memories for every stocked cell in range; returns how many were stored."""
        stored = 0
        for cell, _distance in self._world.cells_in_radius(position, self.radius_in_cells(params)):
            center = self._world.cell_center(cell)
            if cell.food > 0:
                stored += int(self._memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, center, cell.food))
            if cell.neural_energy > 0:
                stored += int(
                    self._memory.add_energy_memory(MemoryEventType.ENERGY_FOUND, center, cell.neural_energy)
                )
        return stored

    def record_terrain(self, position: Vector2) -> bool:
        cell = self._world.get_cell(position.x, position.y)
        if cell is None:
            return False
        return self._memory.add_terrain_memory(self._world.cell_center(cell), cell.terrain, 1)

    def remembered_target(self, position: Vector2, seeking_food: bool, params: DecisionParameters) -> Optional[Vector2]:
        """Nearest remembered sighting, consulted with probability ``memory_trust_factor``."""
        if self._rng.random() > params.memory_trust_factor:
            return None
        kind = MemoryEventType.RESOURCE_FOUND if seeking_food else MemoryEventType.ENERGY_FOUND
        entry = self._memory.nearest(position, kind)
        return entry.position.copy() if entry is not None else None

    def sensed_target(self, position: Vector2, seeking_food: bool, params: DecisionParameters) -> Optional[Vector2]:
        """Best visible cell scored by ``(quantity × preference) / (distance + ε)``."""
        food_pref, energy_pref = resource_preferences(params)
        best_value = 0.0
        best_cell = None
        for cell, distance in self._world.cells_in_radius(position, self.radius_in_cells(params)):
            if seeking_food:
                quantity, preference = cell.food, food_pref
            else:
                quantity, preference = cell.neural_energy, energy_pref
            if quantity <= 0:
                continue
            value = (quantity * preference) / (distance + sparkling_defaults.SENSOR_SCORE_EPSILON)
            if value > best_value:
                best_value = value
                best_cell = cell
        if best_cell is None:
            return None
        return self._world.cell_center(best_cell)
