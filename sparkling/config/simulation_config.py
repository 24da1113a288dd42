"""Simulation configuration dataclasses.

Every value here is plain key-value configuration. ``validate()`` checks
presence, type and basic ranges only; semantic fallbacks (for example a
remote strategy without a credential) are resolved by the inference
service, not here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

from sparkling.config import competition as competition_defaults
from sparkling.config import inference as inference_defaults
from sparkling.config import population as population_defaults
from sparkling.config import sparklings as sparkling_defaults
from sparkling.config import world as world_defaults
from sparkling.exceptions import ConfigurationError

VALID_STRATEGIES = ("local", "remote")


@dataclass
class WorldConfig:
    """World dimensions and resource spawning."""

    width: int = world_defaults.WORLD_WIDTH
    height: int = world_defaults.WORLD_HEIGHT
    cell_size: int = world_defaults.GRID_CELL_SIZE
    resource_spawn_rate: float = world_defaults.RESOURCE_SPAWN_RATE
    resource_spawn_rate_per_sparkling: float = world_defaults.RESOURCE_SPAWN_RATE_PER_SPARKLING
    water_percentage: float = world_defaults.WATER_PERCENTAGE
    mountain_percentage: float = world_defaults.MOUNTAIN_PERCENTAGE
    forest_percentage: float = world_defaults.FOREST_PERCENTAGE
    desert_percentage: float = world_defaults.DESERT_PERCENTAGE

    @property
    def grid_width(self) -> int:
        return -(-self.width // self.cell_size)

    @property
    def grid_height(self) -> int:
        return -(-self.height // self.cell_size)


@dataclass
class SparklingConfig:
    """Per-entity reserves, movement and memory sizing."""

    max_food: float = sparkling_defaults.SPARKLING_MAX_FOOD
    max_neural_energy: float = sparkling_defaults.SPARKLING_MAX_NEURAL_ENERGY
    initial_food_ratio: float = sparkling_defaults.INITIAL_FOOD_RATIO
    initial_energy_ratio: float = sparkling_defaults.INITIAL_ENERGY_RATIO
    speed: float = sparkling_defaults.SPARKLING_SPEED
    memory_capacity: int = sparkling_defaults.MEMORY_CAPACITY


@dataclass
class InferenceConfig:
    """Which reasoning strategy is active and how to reach the remote one.

    Attributes:
        strategy: ``"local"`` or ``"remote"``
        api_key: Upstream credential; only needed when calling the upstream directly
        api_endpoint: Upstream endpoint or a same-origin relay
        use_relay: True when ``api_endpoint`` is a relay that injects the credential
    """

    strategy: str = inference_defaults.DEFAULT_STRATEGY
    api_key: str = ""
    api_endpoint: str = inference_defaults.DEFAULT_API_ENDPOINT
    use_relay: bool = False
    model: str = inference_defaults.DEFAULT_MODEL
    max_tokens: int = inference_defaults.DEFAULT_MAX_TOKENS
    temperature: float = inference_defaults.DEFAULT_TEMPERATURE
    request_timeout: float = inference_defaults.REQUEST_TIMEOUT
    max_retries: int = inference_defaults.MAX_RETRIES
    energy_cost: float = inference_defaults.INFERENCE_ENERGY_COST
    thinking_timeout: float = inference_defaults.THINKING_TIMEOUT
    recent_buffer_size: int = inference_defaults.RECENT_INFERENCE_BUFFER

    @property
    def has_credentials(self) -> bool:
        """Whether the remote strategy can authenticate (directly or via relay)."""
        if self.use_relay:
            return bool(self.api_endpoint)
        return bool(self.api_key) and bool(self.model) and bool(self.api_endpoint)

    @classmethod
    def from_env(cls, **overrides: Any) -> "InferenceConfig":
        """Build from ``SPARKLING_*`` / ``ANTHROPIC_API_KEY`` environment variables."""
        values: Dict[str, Any] = {
            "strategy": os.getenv("SPARKLING_INFERENCE_STRATEGY", inference_defaults.DEFAULT_STRATEGY),
            "api_key": os.getenv("ANTHROPIC_API_KEY", ""),
            "api_endpoint": os.getenv("SPARKLING_INFERENCE_ENDPOINT", inference_defaults.DEFAULT_API_ENDPOINT),
            "use_relay": os.getenv("SPARKLING_INFERENCE_USE_RELAY", "false").lower() == "true",
            "model": os.getenv("SPARKLING_INFERENCE_MODEL", inference_defaults.DEFAULT_MODEL),
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class CompetitionConfig:
    """Encounter and contest radii, penalties and the optional territorial bonus."""

    encounter_radius: float = competition_defaults.ENCOUNTER_RADIUS
    competition_radius: float = competition_defaults.COMPETITION_RADIUS
    loser_penalty: float = competition_defaults.LOSER_PENALTY
    loser_penalty_duration: float = competition_defaults.LOSER_PENALTY_DURATION
    tie_penalty: float = competition_defaults.TIE_PENALTY
    tie_penalty_duration: float = competition_defaults.TIE_PENALTY_DURATION
    territorial_advantage_bonus: float = competition_defaults.TERRITORIAL_ADVANTAGE_BONUS


@dataclass
class PopulationConfig:
    """Initial population and optional population control."""

    initial_count: int = population_defaults.INITIAL_SPARKLING_COUNT
    min_count: int = population_defaults.MIN_SPARKLING_COUNT
    max_count: int = population_defaults.MAX_SPARKLING_COUNT
    auto_control: bool = population_defaults.AUTO_POPULATION_CONTROL
    fadeout_enabled: bool = True


@dataclass
class SimulationConfig:
    """Aggregate configuration for one simulation run."""

    world: WorldConfig = field(default_factory=WorldConfig)
    sparklings: SparklingConfig = field(default_factory=SparklingConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    competition: CompetitionConfig = field(default_factory=CompetitionConfig)
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "SimulationConfig":
        """Default configuration with inference settings read from the environment."""
        config = cls(inference=InferenceConfig.from_env())
        return config.with_overrides(**overrides) if overrides else config

    def with_overrides(self, **overrides: Any) -> "SimulationConfig":
        return replace(self, **overrides)

    def validate(self) -> None:
        """Check presence, type and basic ranges.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        _require_types(self.world, "world")
        _require_types(self.sparklings, "sparklings")
        _require_types(self.inference, "inference")
        _require_types(self.population, "population")
        _require_types(self.competition, "competition")

        if self.world.width <= 0 or self.world.height <= 0:
            raise ConfigurationError("world dimensions must be positive")
        if self.world.cell_size <= 0:
            raise ConfigurationError("world.cell_size must be positive")
        if self.sparklings.max_food <= 0 or self.sparklings.max_neural_energy <= 0:
            raise ConfigurationError("sparkling reserves must be positive")
        if self.sparklings.memory_capacity < 1:
            raise ConfigurationError("sparklings.memory_capacity must be at least 1")
        if self.inference.strategy not in VALID_STRATEGIES:
            raise ConfigurationError(
                f"inference.strategy must be one of {VALID_STRATEGIES}, got {self.inference.strategy!r}"
            )
        if self.population.min_count > self.population.max_count:
            raise ConfigurationError("population.min_count exceeds population.max_count")
        if self.competition.competition_radius > self.competition.encounter_radius:
            raise ConfigurationError("competition.competition_radius exceeds competition.encounter_radius")
        if self.competition.territorial_advantage_bonus < 0:
            raise ConfigurationError("competition.territorial_advantage_bonus must not be negative")


def _require_types(section: Any, name: str) -> None:
    for f in fields(section):
        value = getattr(section, f.name)
        expected = f.type if isinstance(f.type, type) else _TYPE_NAMES.get(str(f.type))
        if expected is None:
            continue
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            continue
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"{name}.{f.name} must be {expected.__name__}, got {type(value).__name__}"
            )


_TYPE_NAMES = {"int": int, "float": float, "str": str, "bool": bool}
