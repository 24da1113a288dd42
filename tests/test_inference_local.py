"""Tests for the rule-based local inference strategy."""

import pytest

from sparkling.inference import LocalRuleStrategy, build_context
from sparkling.math_utils import Vector2
from sparkling.memory import EncounterOutcome, MemoryEventType, MemoryStore
from sparkling.parameters import DecisionParameters


def make_context(food=50.0, energy=50.0, memory=None, parameters=None):
    return build_context(
        sparkling_id=1,
        state="exploring",
        food=food,
        max_food=100.0,
        neural_energy=energy,
        max_neural_energy=100.0,
        memory=memory if memory is not None else MemoryStore(20),
        parameters=parameters or DecisionParameters(),
    )


def test_low_food_with_energy_shifts_toward_food():
    result = LocalRuleStrategy().infer(make_context(food=20.0, energy=80.0))

    assert result.success
    assert result.strategy == "local"
    assert result.parameters["resource_preference"] == pytest.approx(-0.2)


def test_low_energy_with_food_shifts_toward_energy():
    result = LocalRuleStrategy().infer(make_context(food=80.0, energy=20.0))

    assert result.parameters["resource_preference"] == pytest.approx(0.2)


def test_empty_memory_widens_exploration():
    result = LocalRuleStrategy().infer(make_context())

    assert result.parameters == {
        "exploration_range": pytest.approx(220.0),
        "novelty_preference": pytest.approx(0.6),
    }


def test_reliable_memories_increase_trust():
    memory = MemoryStore(20)
    memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(10, 10), 10)
    memory.add_energy_memory(MemoryEventType.ENERGY_FOUND, Vector2(100, 100), 5)

    result = LocalRuleStrategy().infer(make_context(memory=memory))

    assert result.parameters == {"memory_trust_factor": pytest.approx(0.8)}


def test_depleted_memories_raise_thresholds_and_lower_trust():
    memory = MemoryStore(20)
    memory.add_resource_memory(MemoryEventType.RESOURCE_DEPLETED, Vector2(10, 10), 0)
    memory.add_energy_memory(MemoryEventType.ENERGY_DEPLETED, Vector2(100, 100), 0)

    result = LocalRuleStrategy().infer(make_context(memory=memory))

    assert result.parameters["hunger_threshold"] == pytest.approx(0.5)
    assert result.parameters["energy_low_threshold"] == pytest.approx(0.45)
    assert result.parameters["memory_trust_factor"] == pytest.approx(0.6)
    assert result.parameters["exploration_range"] == pytest.approx(220.0)


def test_mixed_memories_leave_trust_alone():
    memory = MemoryStore(20)
    memory.add_resource_memory(MemoryEventType.RESOURCE_DEPLETED, Vector2(10, 10), 0)
    memory.add_energy_memory(MemoryEventType.ENERGY_FOUND, Vector2(100, 100), 5)

    result = LocalRuleStrategy().infer(make_context(memory=memory))

    assert "memory_trust_factor" not in result.parameters
    assert result.parameters["hunger_threshold"] == pytest.approx(0.5)


@pytest.mark.parametrize(
    "outcome,expected",
    [(EncounterOutcome.NEGATIVE, 0.45), (EncounterOutcome.POSITIVE, 0.55)],
)
def test_latest_encounter_adjusts_cooperation(outcome, expected):
    memory = MemoryStore(20)
    memory.add_encounter_memory(Vector2(10, 10), 2, outcome)

    result = LocalRuleStrategy().infer(make_context(memory=memory))

    assert result.parameters["cooperation_tendency"] == pytest.approx(expected)


def test_neutral_encounter_changes_nothing_social():
    memory = MemoryStore(20)
    memory.add_encounter_memory(Vector2(10, 10), 2, EncounterOutcome.NEUTRAL)

    result = LocalRuleStrategy().infer(make_context(memory=memory))

    assert "cooperation_tendency" not in result.parameters
    assert result.reasoning
