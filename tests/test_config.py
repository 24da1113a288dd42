"""Tests for configuration validation and environment loading."""

import dataclasses

import pytest

from sparkling.config.simulation_config import (
    CompetitionConfig,
    InferenceConfig,
    PopulationConfig,
    SimulationConfig,
    WorldConfig,
)
from sparkling.exceptions import ConfigurationError


def test_defaults_are_valid():
    SimulationConfig().validate()


@pytest.mark.parametrize(
    "config",
    [
        SimulationConfig(world=WorldConfig(width=0)),
        SimulationConfig(world=WorldConfig(cell_size=-5)),
        SimulationConfig(world=WorldConfig(width="wide")),
        SimulationConfig(inference=InferenceConfig(strategy="oracle")),
        SimulationConfig(inference=InferenceConfig(max_retries="2")),
        SimulationConfig(population=PopulationConfig(min_count=10, max_count=5)),
        SimulationConfig(competition=CompetitionConfig(encounter_radius=10, competition_radius=20)),
        SimulationConfig(competition=CompetitionConfig(territorial_advantage_bonus=-0.1)),
    ],
)
def test_invalid_configurations_rejected(config):
    with pytest.raises(ConfigurationError):
        config.validate()


def test_int_accepted_for_float_fields():
    config = SimulationConfig(world=WorldConfig(resource_spawn_rate=1))

    config.validate()


def test_with_overrides_returns_copy():
    base = SimulationConfig()
    changed = base.with_overrides(population=dataclasses.replace(base.population, initial_count=3))

    assert changed.population.initial_count == 3
    assert base.population.initial_count == 12


def test_inference_from_env(monkeypatch):
    monkeypatch.setenv("SPARKLING_INFERENCE_STRATEGY", "remote")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "secret")
    monkeypatch.setenv("SPARKLING_INFERENCE_MODEL", "test-model")
    monkeypatch.delenv("SPARKLING_INFERENCE_ENDPOINT", raising=False)
    monkeypatch.delenv("SPARKLING_INFERENCE_USE_RELAY", raising=False)

    config = InferenceConfig.from_env()

    assert config.strategy == "remote"
    assert config.api_key == "secret"
    assert config.model == "test-model"
    assert not config.use_relay
    assert config.has_credentials


def test_relay_from_env(monkeypatch):
    monkeypatch.setenv("SPARKLING_INFERENCE_USE_RELAY", "TRUE")
    monkeypatch.setenv("SPARKLING_INFERENCE_ENDPOINT", "http://localhost:3000/api/anthropic/messages")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    config = SimulationConfig.from_env().inference

    assert config.use_relay
    assert config.api_key == ""
    assert config.has_credentials


def test_missing_key_has_no_credentials(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("SPARKLING_INFERENCE_USE_RELAY", raising=False)

    assert not InferenceConfig.from_env().has_credentials
