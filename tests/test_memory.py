import pytest

from sparkling.math_utils import Vector2
from sparkling.memory import (
    EncounterOutcome,
    MemoryEventType,
    MemoryStore,
    TerrainMemory,
    food_importance,
)
from sparkling.terrain import TerrainType


def test_close_food_sightings_are_stored_once():
    memory = MemoryStore(capacity=20)

    assert memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(100, 100), 10)
    assert not memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(105, 102), 10)

    assert memory.count() == 1


def test_distant_sightings_and_different_kinds_are_kept():
    memory = MemoryStore(capacity=20)

    memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(100, 100), 10)
    memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(130, 100), 10)
    memory.add_energy_memory(MemoryEventType.ENERGY_FOUND, Vector2(100, 100), 5)

    assert memory.count() == 3


def test_terrain_dedup_requires_same_terrain():
    memory = MemoryStore(capacity=20)

    assert memory.add_terrain_memory(Vector2(0, 0), TerrainType.PLAIN)
    assert memory.add_terrain_memory(Vector2(5, 5), TerrainType.FOREST)
    assert not memory.add_terrain_memory(Vector2(5, 5), TerrainType.PLAIN)


def test_encounter_dedup_requires_same_peer():
    memory = MemoryStore(capacity=20)

    assert memory.add_encounter_memory(Vector2(0, 0), 2, EncounterOutcome.NEUTRAL)
    assert memory.add_encounter_memory(Vector2(1, 1), 3, EncounterOutcome.NEUTRAL)
    assert not memory.add_encounter_memory(Vector2(2, 2), 2, EncounterOutcome.POSITIVE)


def test_inference_memories_are_never_deduplicated():
    memory = MemoryStore(capacity=20)

    memory.add_inference_memory(Vector2(10, 10), "first", "no changes", True)
    memory.add_inference_memory(Vector2(10, 10), "second", "no changes", False)

    assert memory.count() == 2
    assert memory.latest_inference().reasoning == "second"


def test_capacity_keeps_most_important_entries():
    memory = MemoryStore(capacity=5)
    importances = [0.9, 0.1, 0.8, 0.2, 0.7, 0.3, 0.6, 0.5]

    for index, importance in enumerate(importances):
        memory.add_entry(
            TerrainMemory(
                kind=MemoryEventType.TERRAIN_DISCOVERED,
                position=Vector2(index * 100, 0),
                importance=importance,
            )
        )

    assert memory.count() == 5
    kept = sorted(entry.importance for entry in memory.all())
    assert kept == [0.5, 0.6, 0.7, 0.8, 0.9]


def test_equal_importance_evicts_oldest_first():
    memory = MemoryStore(capacity=4)

    for tick in range(8):
        memory.add_entry(
            TerrainMemory(
                kind=MemoryEventType.TERRAIN_DISCOVERED,
                position=Vector2(tick * 100, 0),
                importance=0.5,
                timestamp=float(tick),
            )
        )

    assert sorted(entry.timestamp for entry in memory.all()) == [4.0, 5.0, 6.0, 7.0]


def test_match_outside_recent_window_is_not_a_duplicate():
    memory = MemoryStore(capacity=8)

    assert memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(100, 100), 10)
    assert memory.add_terrain_memory(Vector2(300, 300), TerrainType.FOREST)
    assert memory.add_encounter_memory(Vector2(50, 300), 2, EncounterOutcome.NEUTRAL)

    assert memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(100, 100), 10)
    assert len(memory.by_kind(MemoryEventType.RESOURCE_FOUND)) == 2


def test_timestamp_defaults_to_current_time():
    memory = MemoryStore(capacity=10)
    memory.update_time(12.5)

    memory.add_terrain_memory(Vector2(0, 0), TerrainType.WATER)

    assert memory.all()[0].timestamp == 12.5


def test_nearest_and_most_recent_queries():
    memory = MemoryStore(capacity=20)
    assert memory.nearest(Vector2(0, 0), MemoryEventType.RESOURCE_FOUND) is None

    for t, x in ((1.0, 300), (2.0, 50), (3.0, 150)):
        memory.update_time(t)
        memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(x, 0), 5)

    nearest = memory.nearest(Vector2(0, 0), MemoryEventType.RESOURCE_FOUND)
    assert nearest.position == Vector2(50, 0)

    recent = memory.most_recent(MemoryEventType.RESOURCE_FOUND, 2)
    assert [entry.timestamp for entry in recent] == [3.0, 2.0]
    assert memory.recent(1.5)[0].timestamp >= 1.5


def test_default_importance_matches_base_formula():
    memory = MemoryStore(capacity=10)

    memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(0, 0), 20)

    assert memory.all()[0].importance == pytest.approx(food_importance(20))


def test_importance_multiplier_scales_and_clamps():
    memory = MemoryStore(capacity=10, food_importance_param=1.0)

    memory.add_resource_memory(MemoryEventType.RESOURCE_FOUND, Vector2(0, 0), 50)
    assert memory.all()[0].importance == 1.0

    memory.update_importance_multipliers(food_param=0.1, energy_param=0.5)
    assert memory.importance_multipliers == {"food": pytest.approx(0.2), "energy": pytest.approx(1.0)}


def test_wrong_kind_for_resource_memory_is_rejected():
    memory = MemoryStore(capacity=10)

    with pytest.raises(ValueError):
        memory.add_resource_memory(MemoryEventType.ENERGY_FOUND, Vector2(0, 0), 5)


def test_snapshot_contains_payload_fields():
    memory = MemoryStore(capacity=10)
    memory.add_encounter_memory(Vector2(3, 4), 7, EncounterOutcome.NEGATIVE)

    (entry,) = memory.snapshot()

    assert entry["kind"] == "sparkling_encounter"
    assert entry["peer_id"] == 7
    assert entry["outcome"] == "negative"
    assert entry["importance"] == 0.9
