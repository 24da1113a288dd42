"""The per-sparkling decision parameter record."""

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Tuple

from sparkling.parameters.naming import normalize_parameter_key
from sparkling.parameters.specs import PARAMETER_SPECS, SPECS_BY_NAME

logger = logging.getLogger(__name__)

ParameterChanges = Dict[str, Tuple[float, float]]


@dataclass
class DecisionParameters:
    """Bounded numeric genome driving a sparkling's behavior.

    Values are clamped into their declared ranges on construction and on
    every update through :meth:`apply`, so the record is always valid.
    """

    # Resource management
    hunger_threshold: float = 0.4
    critical_hunger_threshold: float = 0.15
    food_satiation_threshold: float = 0.7
    energy_low_threshold: float = 0.35
    critical_energy_threshold: float = 0.1
    energy_satiation_threshold: float = 0.65
    resource_preference: float = 0.0
    collection_efficiency: float = 1.0

    # Movement
    exploration_range: float = 200.0
    exploration_duration: float = 15.0
    rest_duration: float = 5.0
    personal_space_factor: float = 25.0

    # Cognitive
    memory_trust_factor: float = 0.7
    novelty_preference: float = 0.5
    persistence_factor: float = 0.4
    cooperation_tendency: float = 0.5

    # Memory importance
    food_memory_importance: float = 0.5
    energy_memory_importance: float = 0.5

    # Inference
    inference_threshold: float = 70.0
    inference_interval: float = 15.0

    def __post_init__(self) -> None:
        for f in fields(self):
            setattr(self, f.name, SPECS_BY_NAME[f.name].clamp(getattr(self, f.name)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DecisionParameters":
        """Build from a loosely keyed mapping; unknown keys and non-numbers are dropped."""
        params = cls()
        params.apply(values)
        return params

    def apply(self, updates: Mapping[str, Any]) -> ParameterChanges:
        """Merge updates, clamping each value into range.

        Keys are normalized to canonical names; unknown keys and values that
        are not numbers are discarded.

        Returns:
            Mapping of changed parameter name to ``(old, new)``
        """
        changes: ParameterChanges = {}
        for raw_key, raw_value in updates.items():
            name = normalize_parameter_key(raw_key)
            if name is None:
                logger.debug("Dropping unknown parameter %r", raw_key)
                continue
            if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)) or math.isnan(raw_value):
                logger.debug("Dropping non-numeric value for %s: %r", name, raw_value)
                continue
            old = getattr(self, name)
            new = SPECS_BY_NAME[name].clamp(raw_value)
            if new != old:
                setattr(self, name, new)
                changes[name] = (old, new)
        return changes

    def copy(self) -> "DecisionParameters":
        return DecisionParameters(**self.to_dict())

    def to_dict(self) -> Dict[str, float]:
        return {spec.name: getattr(self, spec.name) for spec in PARAMETER_SPECS}

    def is_valid(self) -> bool:
        """True when every value lies within its declared range."""
        return all(spec.contains(getattr(self, spec.name)) for spec in PARAMETER_SPECS)


def summarize_changes(changes: ParameterChanges) -> str:
    """Human readable change list, e.g. ``"resource_preference: 0.00 → -0.20"``."""
    if not changes:
        return "no changes"
    return ", ".join(f"{name}: {old:.2f} → {new:.2f}" for name, (old, new) in changes.items())
