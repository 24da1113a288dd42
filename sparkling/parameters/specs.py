"""Declarative specifications for decision parameters.

Each parameter has a fixed valid range and a description used when the
parameter set is rendered into an inference context. Specs are data so that
clamping, randomization and prompt rendering all share one source of truth.
"""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class ParameterSpec:
    """Bounds and documentation for one decision parameter.

    Attributes:
        name: Canonical snake_case name
        min_val: Minimum allowed value
        max_val: Maximum allowed value
        default: Value used by the balanced profile
        group: Category used when rendering context
        description: What the parameter controls
    """

    name: str
    min_val: float
    max_val: float
    default: float
    group: str
    description: str

    def clamp(self, value: float) -> float:
        return max(self.min_val, min(self.max_val, float(value)))

    def contains(self, value: float) -> bool:
        return self.min_val <= value <= self.max_val


PARAMETER_SPECS: List[ParameterSpec] = [
    # Resource management
    ParameterSpec(
        "hunger_threshold", 0.1, 0.7, 0.4, "resource",
        "Food ratio below which the sparkling starts seeking food",
    ),
    ParameterSpec(
        "critical_hunger_threshold", 0.05, 0.3, 0.15, "resource",
        "Food ratio at which hunger overrides persistence",
    ),
    ParameterSpec(
        "food_satiation_threshold", 0.5, 0.95, 0.7, "resource",
        "Food ratio at which the sparkling stops seeking food",
    ),
    ParameterSpec(
        "energy_low_threshold", 0.1, 0.7, 0.35, "resource",
        "Neural energy ratio below which the sparkling starts seeking energy",
    ),
    ParameterSpec(
        "critical_energy_threshold", 0.05, 0.3, 0.1, "resource",
        "Neural energy ratio at which the need overrides persistence",
    ),
    ParameterSpec(
        "energy_satiation_threshold", 0.5, 0.95, 0.65, "resource",
        "Neural energy ratio at which the sparkling stops seeking energy",
    ),
    ParameterSpec(
        "resource_preference", -1.0, 1.0, 0.0, "resource",
        "Preference between resources (-1 prefers food, 1 prefers neural energy)",
    ),
    ParameterSpec(
        "collection_efficiency", 0.5, 1.5, 1.0, "resource",
        "Multiplier on collection speed",
    ),
    # Movement
    ParameterSpec(
        "exploration_range", 100.0, 400.0, 200.0, "movement",
        "How far the sparkling senses and ranges while exploring",
    ),
    ParameterSpec(
        "exploration_duration", 5.0, 30.0, 15.0, "movement",
        "Seconds of exploration before resting",
    ),
    ParameterSpec(
        "rest_duration", 2.0, 10.0, 5.0, "movement",
        "Typical seconds spent resting",
    ),
    ParameterSpec(
        "personal_space_factor", 10.0, 50.0, 25.0, "movement",
        "Preferred distance from other sparklings",
    ),
    # Cognitive
    ParameterSpec(
        "memory_trust_factor", 0.1, 1.0, 0.7, "cognitive",
        "How much the sparkling relies on memory over direct sensing",
    ),
    ParameterSpec(
        "novelty_preference", 0.1, 1.0, 0.5, "cognitive",
        "Preference for new headings and unexplored areas",
    ),
    ParameterSpec(
        "persistence_factor", 0.1, 0.9, 0.4, "cognitive",
        "Resistance to switching goals while exploring",
    ),
    ParameterSpec(
        "cooperation_tendency", 0.1, 1.0, 0.5, "cognitive",
        "Willingness to share resources with other sparklings",
    ),
    ParameterSpec(
        "food_memory_importance", 0.1, 1.0, 0.5, "memory",
        "Weight of food memories when deciding what to forget",
    ),
    ParameterSpec(
        "energy_memory_importance", 0.1, 1.0, 0.5, "memory",
        "Weight of neural energy memories when deciding what to forget",
    ),
    # Inference
    ParameterSpec(
        "inference_threshold", 50.0, 100.0, 70.0, "inference",
        "Neural energy required before an inference may start",
    ),
    ParameterSpec(
        "inference_interval", 10.0, 30.0, 15.0, "inference",
        "Minimum seconds between inferences",
    ),
]

SPECS_BY_NAME: Dict[str, ParameterSpec] = {spec.name: spec for spec in PARAMETER_SPECS}

PARAMETER_NAMES: List[str] = [spec.name for spec in PARAMETER_SPECS]


def get_spec(name: str) -> ParameterSpec:
    """Look up a spec by canonical name.

    Raises:
        KeyError: If the name is not a known parameter
    """
    return SPECS_BY_NAME[name]
