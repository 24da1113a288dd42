"""Tests for the Sparkling entity: metabolism, fade-out and interactions."""

import pytest

from sparkling.config.simulation_config import PopulationConfig, SimulationConfig
from sparkling.inference import InferenceResult
from sparkling.math_utils import Vector2
from sparkling.memory import EncounterOutcome, MemoryEventType
from sparkling.state_machine import BehaviorState, InferenceStatus
from tests.fakes.fake_random import FixedRandom


def test_initial_reserves_and_state(make_sparkling):
    sparkling = make_sparkling()

    assert sparkling.food == 70.0
    assert sparkling.neural_energy == 30.0
    assert sparkling.state is BehaviorState.EXPLORING
    assert sparkling.inference_status is InferenceStatus.IDLE
    assert sparkling.is_active()


def test_moving_metabolism(make_sparkling):
    sparkling = make_sparkling()

    sparkling.update(1.0, 1.0)

    assert sparkling.food == pytest.approx(69.4)
    assert sparkling.neural_energy == pytest.approx(30.0)


def test_stationary_metabolism_skips_movement_cost(make_sparkling):
    sparkling = make_sparkling()
    sparkling.behavior.machine.force_state(BehaviorState.RESTING, at=0.0)
    sparkling.behavior.idle_time = 10.0

    sparkling.update(1.0, 1.0)

    assert sparkling.food == pytest.approx(69.5)


def test_critical_hunger_drains_neural_energy(make_sparkling):
    sparkling = make_sparkling()
    sparkling.reserves.set_levels(10.0, 30.0)

    sparkling.update(1.0, 1.0)

    assert sparkling.food == pytest.approx(9.4)
    assert sparkling.neural_energy == pytest.approx(28.0)


def test_depletion_fades_then_marks_for_removal(make_sparkling):
    sparkling = make_sparkling()
    sparkling.reserves.set_levels(0.0, 0.0)

    sparkling.update(0.1, 1.0)

    assert sparkling.state is BehaviorState.FADING
    assert sparkling.is_fading
    assert not sparkling.is_active()
    assert not sparkling.ready_for_removal

    sparkling.update(2.5, 3.5)
    assert sparkling.fade_progress == pytest.approx(0.5)
    assert not sparkling.ready_for_removal

    sparkling.update(2.5, 6.0)
    assert sparkling.ready_for_removal


def test_depletion_without_fadeout_keeps_sparkling(make_sparkling):
    config = SimulationConfig(population=PopulationConfig(fadeout_enabled=False))
    sparkling = make_sparkling(config=config)
    sparkling.reserves.set_levels(0.0, 0.0)

    sparkling.update(0.1, 1.0)

    assert not sparkling.is_fading
    assert sparkling.state is not BehaviorState.FADING


def test_begin_fade_is_idempotent(make_sparkling):
    sparkling = make_sparkling()

    assert sparkling.begin_fade("population control")
    assert not sparkling.begin_fade("again")


def test_record_encounter_stores_memory_and_backs_off(make_sparkling):
    sparkling = make_sparkling(rng=FixedRandom(0.0))

    recorded = sparkling.record_encounter(2, Vector2(115, 110), EncounterOutcome.NEGATIVE)

    assert recorded
    (memory,) = sparkling.memory.by_kind(MemoryEventType.SPARKLING_ENCOUNTER)
    assert memory.peer_id == 2
    assert sparkling.velocity.x == pytest.approx(-1.75)
    assert sparkling.velocity.y == pytest.approx(0.0)


def test_record_encounter_can_be_skipped(make_sparkling):
    sparkling = make_sparkling(rng=FixedRandom(0.99))
    velocity = sparkling.velocity

    recorded = sparkling.record_encounter(2, Vector2(200, 200), EncounterOutcome.NEUTRAL)

    assert not recorded
    assert sparkling.memory.count() == 0
    assert sparkling.velocity == velocity


def test_strong_penalty_enters_competing_until_it_expires(make_sparkling):
    sparkling = make_sparkling()
    sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    sparkling.apply_competition_penalty(0.5, 1.0)
    assert sparkling.state is BehaviorState.COMPETING
    assert sparkling.competition_penalty == 0.5

    sparkling.update(0.5, 0.5)
    assert sparkling.state is BehaviorState.COMPETING

    sparkling.update(0.5, 1.0)
    assert sparkling.state is BehaviorState.COLLECTING
    assert sparkling.competition_penalty == 0.0


def test_weak_penalty_does_not_compete(make_sparkling):
    sparkling = make_sparkling()
    sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    sparkling.apply_competition_penalty(0.3, 3.0)

    assert sparkling.state is BehaviorState.COLLECTING
    assert sparkling.competition_timer == 3.0


def test_penalty_outside_collecting_does_not_compete(make_sparkling):
    sparkling = make_sparkling()

    sparkling.apply_competition_penalty(0.5, 5.0)

    assert sparkling.state is BehaviorState.EXPLORING
    assert sparkling.competition_penalty == 0.5


def test_collecting_withdraws_from_cell(make_sparkling, empty_world):
    empty_world.get_cell(110, 110).food = 50.0
    sparkling = make_sparkling()
    sparkling.reserves.set_levels(40.0, 30.0)
    sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    sparkling.update(0.1, 1.0)

    assert sparkling.last_collection.food > 0
    assert empty_world.get_cell(110, 110).food == pytest.approx(50.0 - sparkling.last_collection.food)
    assert sparkling.memory.by_kind(MemoryEventType.RESOURCE_FOUND)


def test_satiated_collector_claims_territory(make_sparkling):
    sparkling = make_sparkling()
    sparkling.reserves.set_levels(90.0, 30.0)
    sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    sparkling.update(0.1, 0.1)

    territory = sparkling.territory
    assert territory is not None
    assert territory.center == Vector2(110, 110)
    assert territory.radius == pytest.approx(187.5)
    assert sparkling.behavior.home == Vector2(110, 110)


def test_hungry_collector_claims_nothing(make_sparkling):
    sparkling = make_sparkling()
    sparkling.reserves.set_levels(40.0, 30.0)
    sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    sparkling.update(0.1, 0.1)

    assert sparkling.territory is None


def test_successful_inference_result_updates_parameters(make_sparkling):
    sparkling = make_sparkling()

    summary = sparkling.apply_inference_result(
        InferenceResult(
            success=True,
            reasoning="Food is scarce",
            parameters={"hungerThreshold": 0.5, "foodMemoryImportance": 1.0, "bogus": 3},
        )
    )

    assert sparkling.parameters.hunger_threshold == 0.5
    assert "hunger_threshold: 0.40 → 0.50" in summary
    assert sparkling.memory.importance_multipliers["food"] == pytest.approx(2.0)
    latest = sparkling.memory.latest_inference()
    assert latest.success
    assert latest.reasoning == "Food is scarce"
    assert latest.parameter_changes == summary


def test_failed_inference_result_only_records_memory(make_sparkling):
    sparkling = make_sparkling()
    before = sparkling.parameters.to_dict()

    summary = sparkling.apply_inference_result(
        InferenceResult.failure("timed out", error="timeout")
    )

    assert summary == "no changes"
    assert sparkling.parameters.to_dict() == before
    latest = sparkling.memory.latest_inference()
    assert not latest.success
    assert latest.importance == 0.6


def test_inference_context_snapshot(make_sparkling):
    sparkling = make_sparkling(sparkling_id=7)
    sparkling.memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(50, 50), 12)

    context = sparkling.build_inference_context()

    assert context.sparkling_id == 7
    assert context.state == "exploring"
    assert context.food_ratio == pytest.approx(0.7)
    assert context.parameters["hunger_threshold"] == 0.4
    assert context.memory_count("resource_found") == 1
    assert "Sparkling 7" in context.prompt


def test_snapshot_is_plain_data(make_sparkling):
    sparkling = make_sparkling()
    sparkling.memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(50, 50), 12)

    snapshot = sparkling.to_snapshot(include_memory=True)

    assert snapshot["id"] == 1
    assert snapshot["state"] == "exploring"
    assert snapshot["position"] == {"x": 110, "y": 110}
    assert snapshot["inference"]["status"] == "idle"
    assert snapshot["memory_count"] == 1
    assert snapshot["memories"][0]["kind"] == "resource_found"
    assert "memories" not in sparkling.to_snapshot()
