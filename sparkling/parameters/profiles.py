"""Behavioral profiles and parameter-set utilities.

Profiles are named presets layered over the balanced defaults. The utilities
here never mutate their inputs; each returns a fresh, clamped record.
"""

import random
from enum import Enum
from typing import Dict, Optional

from sparkling.parameters.decision import DecisionParameters
from sparkling.parameters.specs import PARAMETER_SPECS, SPECS_BY_NAME

DEFAULT_VARIATION = 0.2
EVOLVE_STEP = 0.1


class BehavioralProfile(Enum):
    BALANCED = "balanced"
    EXPLORER = "explorer"
    GATHERER = "gatherer"
    ENERGY_SEEKER = "energy_seeker"
    SOCIAL = "social"
    CAUTIOUS = "cautious"


PROFILE_OVERRIDES: Dict[BehavioralProfile, Dict[str, float]] = {
    BehavioralProfile.BALANCED: {},
    BehavioralProfile.EXPLORER: {
        "exploration_range": 300,
        "exploration_duration": 25,
        "rest_duration": 3,
        "novelty_preference": 0.85,
        "memory_trust_factor": 0.5,
        "persistence_factor": 0.2,
    },
    BehavioralProfile.GATHERER: {
        "hunger_threshold": 0.6,
        "critical_hunger_threshold": 0.25,
        "food_satiation_threshold": 0.9,
        "resource_preference": -0.7,
        "collection_efficiency": 1.3,
        "memory_trust_factor": 0.8,
        "persistence_factor": 0.7,
        "food_memory_importance": 0.8,
    },
    BehavioralProfile.ENERGY_SEEKER: {
        "energy_low_threshold": 0.5,
        "critical_energy_threshold": 0.2,
        "energy_satiation_threshold": 0.9,
        "resource_preference": 0.7,
        "collection_efficiency": 1.3,
        "memory_trust_factor": 0.8,
        "persistence_factor": 0.7,
        "energy_memory_importance": 0.8,
    },
    BehavioralProfile.SOCIAL: {
        "personal_space_factor": 15,
        "cooperation_tendency": 0.9,
        "exploration_range": 150,
        "memory_trust_factor": 0.8,
        "persistence_factor": 0.5,
    },
    BehavioralProfile.CAUTIOUS: {
        "hunger_threshold": 0.5,
        "energy_low_threshold": 0.45,
        "exploration_range": 150,
        "exploration_duration": 10,
        "rest_duration": 7,
        "personal_space_factor": 40,
        "memory_trust_factor": 0.9,
        "persistence_factor": 0.6,
        "novelty_preference": 0.2,
    },
}

# Evolution areas: parameter name -> +1 moves with success, -1 against it
_EVOLVE_RULES: Dict[str, Dict[str, int]] = {
    "food": {"hunger_threshold": -1, "collection_efficiency": 1, "resource_preference": -1},
    "energy": {"energy_low_threshold": -1, "collection_efficiency": 1, "resource_preference": 1},
    "exploration": {"exploration_range": 1, "novelty_preference": 1, "memory_trust_factor": -1},
    "social": {"cooperation_tendency": 1, "personal_space_factor": -1},
    "inference": {"inference_threshold": -1, "inference_interval": -1},
}

EVOLVE_AREAS = tuple(_EVOLVE_RULES)


def for_profile(profile: BehavioralProfile) -> DecisionParameters:
    """Balanced defaults with the profile's overrides applied."""
    params = DecisionParameters()
    params.apply(PROFILE_OVERRIDES[profile])
    return params


def randomized(
    base: DecisionParameters,
    variation: float = DEFAULT_VARIATION,
    rng: Optional[random.Random] = None,
) -> DecisionParameters:
    """Vary every value by up to ``±variation`` of itself, then clamp."""
    rng = rng or random.Random()
    values = {}
    for spec in PARAMETER_SPECS:
        value = getattr(base, spec.name)
        offset = (rng.random() * 2 - 1) * variation
        values[spec.name] = spec.clamp(value + value * offset)
    return DecisionParameters(**values)


def blend(a: DecisionParameters, b: DecisionParameters, ratio: float = 0.5) -> DecisionParameters:
    """Linear blend; ``ratio`` 0 yields ``a`` and 1 yields ``b``."""
    values = {
        spec.name: getattr(a, spec.name) * (1 - ratio) + getattr(b, spec.name) * ratio
        for spec in PARAMETER_SPECS
    }
    return DecisionParameters(**values)


def evolve(params: DecisionParameters, area: str, success_factor: float) -> DecisionParameters:
    """Nudge the parameters of one behavioral area by ``0.1 × success_factor``.

    Args:
        params: Current parameters (not modified)
        area: One of ``food``, ``energy``, ``exploration``, ``social``, ``inference``
        success_factor: How well the current parameters worked, -1..1

    Raises:
        ValueError: If ``area`` is unknown
    """
    if area not in _EVOLVE_RULES:
        raise ValueError(f"unknown evolution area {area!r}; expected one of {EVOLVE_AREAS}")

    step = EVOLVE_STEP * success_factor
    result = params.copy()
    for name, direction in _EVOLVE_RULES[area].items():
        setattr(result, name, SPECS_BY_NAME[name].clamp(getattr(result, name) + direction * step))
    return result


def random_profile(rng: random.Random) -> BehavioralProfile:
    return rng.choice(list(BehavioralProfile))
