"""Sparkling Field: foraging agents that rewrite their own decision parameters."""

from sparkling.config.simulation_config import (
    CompetitionConfig,
    InferenceConfig,
    PopulationConfig,
    SimulationConfig,
    SparklingConfig,
    WorldConfig,
)
from sparkling.entities import Sparkling
from sparkling.exceptions import (
    ConfigurationError,
    InferenceError,
    ResponseParseError,
    SimulationError,
    SparklingError,
)
from sparkling.inference import InferenceService
from sparkling.simulation import SimulationEngine, TickResult
from sparkling.world import World

__version__ = "0.1.0"

__all__ = [
    "CompetitionConfig",
    "ConfigurationError",
    "InferenceConfig",
    "InferenceError",
    "InferenceService",
    "PopulationConfig",
    "ResponseParseError",
    "SimulationConfig",
    "SimulationEngine",
    "SimulationError",
    "Sparkling",
    "SparklingConfig",
    "SparklingError",
    "TickResult",
    "World",
    "WorldConfig",
]
