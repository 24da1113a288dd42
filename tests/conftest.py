"""Pytest configuration and fixtures for sparkling tests."""

import random

import pytest

from sparkling.config.simulation_config import PopulationConfig, SimulationConfig, WorldConfig
from sparkling.math_utils import Vector2
from sparkling.parameters import DecisionParameters
from sparkling.world import World


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def small_config():
    """A 10x8-cell world with a handful of sparklings."""
    return SimulationConfig(
        world=WorldConfig(width=200, height=160, cell_size=20),
        population=PopulationConfig(initial_count=4, min_count=2, max_count=8),
        seed=42,
    )


@pytest.fixture
def empty_world(seeded_rng):
    """All-plain 10x10 world with no resources (not initialized)."""
    return World(WorldConfig(width=200, height=200, cell_size=20), rng=seeded_rng)


@pytest.fixture
def small_world(small_config, seeded_rng):
    world = World(small_config.world, rng=seeded_rng)
    world.initialize()
    return world


@pytest.fixture
def make_sparkling(empty_world, seeded_rng):
    """Factory for sparklings in the empty world with balanced default parameters."""
    from sparkling.entities import Sparkling

    def _make(sparkling_id=1, position=None, parameters=None, service=None, config=None, rng=None):
        return Sparkling(
            sparkling_id,
            position if position is not None else Vector2(110, 110),
            empty_world,
            rng=rng if rng is not None else seeded_rng,
            config=config,
            service=service,
            parameters=parameters if parameters is not None else DecisionParameters(),
        )

    return _make


@pytest.fixture
def simulation_engine(small_config):
    """Setup a simulation engine for testing with deterministic seed."""
    from sparkling.simulation import SimulationEngine

    engine = SimulationEngine(small_config)
    engine.setup()
    yield engine
    engine.shutdown()
