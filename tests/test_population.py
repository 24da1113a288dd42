"""Tests for population control, replacement inheritance and removal."""

import dataclasses
import random

from sparkling.config.simulation_config import PopulationConfig
from sparkling.parameters import BehavioralProfile
from sparkling.simulation import SimulationEngine
from sparkling.systems import inherit_parameters


def test_replacement_spawned_below_minimum(simulation_engine):
    for sparkling in list(simulation_engine.sparklings)[1:]:
        simulation_engine.remove_sparkling(sparkling.id)
    assert simulation_engine.live_count() == 1

    result = simulation_engine.update()

    assert result.systems["Population"].entities_spawned == 1
    assert simulation_engine.live_count() == 2

    result = simulation_engine.update()
    assert result.systems["Population"].entities_spawned == 0


def test_weakest_sent_fading_above_maximum(simulation_engine):
    while len(simulation_engine.sparklings) < 9:
        simulation_engine.spawn_sparkling()
    weakling = simulation_engine.sparklings[3]
    weakling.reserves.set_levels(1.0, 1.0)

    simulation_engine.update()

    assert weakling.is_fading
    assert simulation_engine.live_count() == 8


def test_no_culling_when_fadeout_disabled(small_config):
    config = small_config.with_overrides(
        population=dataclasses.replace(small_config.population, fadeout_enabled=False)
    )
    with SimulationEngine(config) as engine:
        engine.setup()
        while len(engine.sparklings) < 10:
            engine.spawn_sparkling()

        engine.update()

        assert engine.live_count() == 10


def test_no_control_when_auto_control_disabled(small_config):
    config = small_config.with_overrides(
        population=PopulationConfig(initial_count=1, min_count=3, max_count=8, auto_control=False)
    )
    with SimulationEngine(config) as engine:
        engine.setup()

        engine.update()

        assert len(engine.sparklings) == 1


def test_faded_sparklings_are_removed(simulation_engine):
    victim = simulation_engine.sparklings[0]
    victim.begin_fade("test")

    for _ in range(12):
        simulation_engine.update(0.5)

    assert simulation_engine.get_sparkling(victim.id) is None
    assert simulation_engine.population_system.get_debug_info()["total_removed"] >= 1


def test_inheritance_without_parents_uses_random_profile():
    profile, parameters = inherit_parameters([], random.Random(1))

    assert isinstance(profile, BehavioralProfile)
    assert parameters.is_valid()


def test_inheritance_blends_two_fittest(simulation_engine):
    sparklings = simulation_engine.sparklings
    strong, runner_up, weak, weakest = sparklings[:4]
    strong.reserves.set_levels(100.0, 100.0)
    runner_up.reserves.set_levels(90.0, 90.0)
    weak.reserves.set_levels(10.0, 10.0)
    weakest.reserves.set_levels(5.0, 5.0)
    strong.parameters.apply({"exploration_range": 300})
    runner_up.parameters.apply({"exploration_range": 100})

    profile, parameters = inherit_parameters(sparklings, random.Random(3))

    assert profile is strong.profile
    assert parameters.is_valid()
    assert 180.0 <= parameters.exploration_range <= 220.0
