"""Decision parameters: specs, the bounded record, profiles and utilities."""

from sparkling.parameters.decision import DecisionParameters, ParameterChanges, summarize_changes
from sparkling.parameters.naming import normalize_parameter_key
from sparkling.parameters.profiles import (
    BehavioralProfile,
    blend,
    evolve,
    for_profile,
    random_profile,
    randomized,
)
from sparkling.parameters.specs import PARAMETER_NAMES, PARAMETER_SPECS, ParameterSpec, get_spec

__all__ = [
    "BehavioralProfile",
    "DecisionParameters",
    "PARAMETER_NAMES",
    "PARAMETER_SPECS",
    "ParameterChanges",
    "ParameterSpec",
    "blend",
    "evolve",
    "for_profile",
    "get_spec",
    "normalize_parameter_key",
    "random_profile",
    "randomized",
    "summarize_changes",
]
