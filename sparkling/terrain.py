"""Terrain kinds and their multipliers.

Each terrain kind affects how fast a sparkling moves through a cell and how
much food and neural energy the cell tends to produce.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class TerrainType(Enum):
    """Terrain classification of a grid cell."""

    PLAIN = "plain"
    WATER = "water"
    MOUNTAIN = "mountain"
    FOREST = "forest"
    DESERT = "desert"


@dataclass(frozen=True)
class TerrainProperties:
    """Multipliers applied by a terrain kind.

    Attributes:
        movement_cost: Difficulty of moving through the cell (1.0 = normal)
        food_multiplier: Abundance of food
        energy_multiplier: Abundance of neural energy
    """

    movement_cost: float
    food_multiplier: float
    energy_multiplier: float


TERRAIN_PROPERTIES: Dict[TerrainType, TerrainProperties] = {
    TerrainType.PLAIN: TerrainProperties(1.0, 1.0, 1.0),
    TerrainType.WATER: TerrainProperties(2.5, 0.2, 1.5),
    TerrainType.MOUNTAIN: TerrainProperties(3.0, 0.4, 3.0),
    TerrainType.FOREST: TerrainProperties(1.5, 2.0, 1.2),
    TerrainType.DESERT: TerrainProperties(1.8, 0.3, 0.5),
}


def properties_for(terrain: TerrainType) -> TerrainProperties:
    return TERRAIN_PROPERTIES[terrain]
