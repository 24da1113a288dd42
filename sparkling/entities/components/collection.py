"""Collection component: withdraws resources from the sparkling's cell."""

import random
from dataclasses import dataclass
from typing import Tuple

from sparkling.config import sparklings as sparkling_defaults
from sparkling.entities.components.reserves import ResourceReserves
from sparkling.math_utils import Vector2
from sparkling.memory import MemoryEventType, MemoryStore
from sparkling.parameters import DecisionParameters
from sparkling.protocols import WorldView


@dataclass
class CollectionOutcome:
    food: float = 0.0
    neural_energy: float = 0.0

    @property
    def total(self) -> float:
        return self.food + self.neural_energy


class CollectionComponent:
    """Moves resources from a world cell into reserves and records the result.

    A non-zero withdrawal writes a found-memory with the collected amount; a
    zero-yield attempt on a non-zero intended amount writes a depleted-memory,
    which distinguishes "nothing here" from "haven't looked here".
    """

    def __init__(
        self,
        world: WorldView,
        memory: MemoryStore,
        reserves: ResourceReserves,
        rng: random.Random,
        collection_rate: float = sparkling_defaults.COLLECTION_RATE,
    ) -> None:
        self._world = world
        self._memory = memory
        self._reserves = reserves
        self._rng = rng
        self.collection_rate = collection_rate

    def intended_amounts(self, params: DecisionParameters, dwell_time: float, penalty: float) -> Tuple[float, float]:
        food = self.collection_rate * dwell_time * params.collection_efficiency * (1 - penalty)
        return food, food * sparkling_defaults.ENERGY_COLLECTION_FACTOR

    def collect(self, position: Vector2, params: DecisionParameters, dwell_time: float, penalty: float) -> CollectionOutcome:
        food_amount, energy_amount = self.intended_amounts(params, dwell_time, penalty)
        outcome = CollectionOutcome()

        energy_first = params.resource_preference > 0 and self._rng.random() < params.resource_preference

        if energy_first:
            if not self._reserves.energy_full:
                outcome.neural_energy = self._collect_energy(position, energy_amount)
                if outcome.neural_energy == 0 and not self._reserves.food_full:
                    outcome.food = self._collect_food(position, food_amount)
            else:
                outcome.food = self._collect_food(position, food_amount)
        else:
            if not self._reserves.food_full:
                outcome.food = self._collect_food(position, food_amount)
                if outcome.food == 0 and not self._reserves.energy_full:
                    outcome.neural_energy = self._collect_energy(position, energy_amount)
            else:
                outcome.neural_energy = self._collect_energy(position, energy_amount)
        return outcome

    def _collect_food(self, position: Vector2, amount: float) -> float:
        collected = self._world.collect_food(position.x, position.y, amount)
        if collected > 0:
            self._reserves.add_food(collected)
            self._memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, position, collected)
        elif amount > 0:
            self._memory.add_resource_memory(MemoryEventType.RESOURCE_DEPLETED, position, 0.0)
        return collected

    def _collect_energy(self, position: Vector2, amount: float) -> float:
        collected = self._world.collect_neural_energy(position.x, position.y, amount)
        if collected > 0:
            self._reserves.add_neural_energy(collected)
            self._memory.add_energy_memory(MemoryEventType.ENERGY_FOUND, position, collected)
        elif amount > 0:
            self._memory.add_energy_memory(MemoryEventType.ENERGY_DEPLETED, position, 0.0)
        return collected
