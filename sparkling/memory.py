"""Per-sparkling bounded memory.

The store is an importance-weighted, deduplicating event log:
- resource and energy sightings and depletions
- terrain discoveries
- encounters with other sparklings
- outcomes of inference runs

When the store grows past its capacity the least important entries are
dropped, so important memories survive while the rest behave roughly FIFO.
All queries are read-only and return empty lists or None on absence.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from sparkling.math_utils import Vector2, clamp
from sparkling.terrain import TerrainType

logger = logging.getLogger(__name__)

DEDUP_DISTANCE = 20.0
FOOD_DEDUP_DISTANCE = 15.0
RECENT_WINDOW_FRACTION = 0.25
REORDER_IMPORTANCE_GAP = 0.2

TERRAIN_IMPORTANCE = 0.5
INFERENCE_SUCCESS_IMPORTANCE = 0.9
INFERENCE_FAILURE_IMPORTANCE = 0.6


class MemoryEventType(Enum):
    """Kinds of events a sparkling can remember."""

    RESOURCE_FOUND = "resource_found"
    RESOURCE_DEPLETED = "resource_depleted"
    ENERGY_FOUND = "energy_found"
    ENERGY_DEPLETED = "energy_depleted"
    TERRAIN_DISCOVERED = "terrain_discovered"
    SPARKLING_ENCOUNTER = "sparkling_encounter"
    INFERENCE_PERFORMED = "inference_performed"


FOOD_KINDS = (MemoryEventType.RESOURCE_FOUND, MemoryEventType.RESOURCE_DEPLETED)
ENERGY_KINDS = (MemoryEventType.ENERGY_FOUND, MemoryEventType.ENERGY_DEPLETED)


class EncounterOutcome(Enum):
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"


ENCOUNTER_IMPORTANCE: Dict[EncounterOutcome, float] = {
    EncounterOutcome.NEUTRAL: 0.5,
    EncounterOutcome.POSITIVE: 0.7,
    EncounterOutcome.NEGATIVE: 0.9,
}


@dataclass
class MemoryEntry:
    """Common fields of every memory.

    Attributes:
        kind: Event kind
        position: Where the event happened (world coordinates)
        timestamp: Simulation time; None means "now" when added to a store
        importance: Retention weight in [0, 1]
    """

    kind: MemoryEventType
    position: Vector2
    timestamp: Optional[float] = None
    importance: float = 0.5
    sequence: int = field(default=0, repr=False, compare=False)

    def payload(self) -> Dict[str, object]:
        return {}

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "kind": self.kind.value,
            "position": self.position.to_dict(),
            "timestamp": self.timestamp,
            "importance": round(self.importance, 3),
        }
        data.update(self.payload())
        return data


@dataclass
class ResourceMemory(MemoryEntry):
    """Food or neural energy found/depleted at a location."""

    amount: float = 0.0

    def payload(self) -> Dict[str, object]:
        return {"amount": self.amount}


@dataclass
class TerrainMemory(MemoryEntry):
    terrain: TerrainType = TerrainType.PLAIN
    size: int = 1

    def payload(self) -> Dict[str, object]:
        return {"terrain": self.terrain.value, "size": self.size}


@dataclass
class EncounterMemory(MemoryEntry):
    peer_id: int = -1
    outcome: EncounterOutcome = EncounterOutcome.NEUTRAL

    def payload(self) -> Dict[str, object]:
        return {"peer_id": self.peer_id, "outcome": self.outcome.value}


@dataclass
class InferenceMemory(MemoryEntry):
    """Outcome of one inference run.

    Attributes:
        reasoning: Free text returned by the strategy
        parameter_changes: Human readable change summary
        success: Whether the run produced a usable result
    """

    reasoning: str = ""
    parameter_changes: str = ""
    success: bool = False

    def payload(self) -> Dict[str, object]:
        return {
            "reasoning": self.reasoning,
            "parameter_changes": self.parameter_changes,
            "success": self.success,
        }


def food_importance(amount: float) -> float:
    return min(0.3 + (amount / 50.0) * 0.6, 0.9)


def energy_importance(amount: float) -> float:
    return min(0.5 + (amount / 20.0) * 0.4, 0.95)


def importance_multiplier(parameter_value: float) -> float:
    """Map a memory-importance parameter (0.1..1, default 0.5) onto a multiplier.

    The default parameter value maps to 1.0 so that an unmodified sparkling
    weighs memories exactly as the base formulas do.
    """
    return 2.0 * parameter_value


class MemoryStore:
    """Bounded memory owned by a single sparkling.

    Attributes:
        capacity: Maximum number of stored entries
    """

    def __init__(
        self,
        capacity: int,
        food_importance_param: float = 0.5,
        energy_importance_param: float = 0.5,
    ) -> None:
        self.capacity = max(1, int(capacity))
        self._entries: List[MemoryEntry] = []
        self._current_time = 0.0
        self._next_sequence = 0
        self._food_multiplier = importance_multiplier(food_importance_param)
        self._energy_multiplier = importance_multiplier(energy_importance_param)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update_time(self, time: float) -> None:
        self._current_time = time

    @property
    def current_time(self) -> float:
        return self._current_time

    def update_importance_multipliers(self, food_param: float, energy_param: float) -> None:
        """Refresh the per-resource multipliers from decision parameters."""
        self._food_multiplier = importance_multiplier(food_param)
        self._energy_multiplier = importance_multiplier(energy_param)

    @property
    def importance_multipliers(self) -> Dict[str, float]:
        return {"food": self._food_multiplier, "energy": self._energy_multiplier}

    def add_entry(self, entry: MemoryEntry) -> bool:
        """Store an entry unless it duplicates a recent one.

        Returns:
            True if stored, False if rejected as a duplicate
        """
        if entry.timestamp is None:
            entry.timestamp = self._current_time

        if self._is_duplicate(entry):
            return False

        entry.sequence = self._next_sequence
        self._next_sequence += 1
        self._entries.append(entry)
        self._prune()
        return True

    def add_resource_memory(self, kind: MemoryEventType, position: Vector2, amount: float) -> bool:
        """Record food found/depleted at ``position``."""
        if kind not in FOOD_KINDS:
            raise ValueError(f"not a food memory kind: {kind}")
        importance = clamp(food_importance(amount) * self._food_multiplier, 0.0, 1.0)
        return self.add_entry(
            ResourceMemory(kind=kind, position=position.copy(), importance=importance, amount=amount)
        )

    def add_energy_memory(self, kind: MemoryEventType, position: Vector2, amount: float) -> bool:
        """Record neural energy found/depleted at ``position``."""
        if kind not in ENERGY_KINDS:
            raise ValueError(f"not an energy memory kind: {kind}")
        importance = clamp(energy_importance(amount) * self._energy_multiplier, 0.0, 1.0)
        return self.add_entry(
            ResourceMemory(kind=kind, position=position.copy(), importance=importance, amount=amount)
        )

    def add_terrain_memory(self, position: Vector2, terrain: TerrainType, size: int = 1) -> bool:
        return self.add_entry(
            TerrainMemory(
                kind=MemoryEventType.TERRAIN_DISCOVERED,
                position=position.copy(),
                importance=TERRAIN_IMPORTANCE,
                terrain=terrain,
                size=size,
            )
        )

    def add_encounter_memory(self, position: Vector2, peer_id: int, outcome: EncounterOutcome) -> bool:
        return self.add_entry(
            EncounterMemory(
                kind=MemoryEventType.SPARKLING_ENCOUNTER,
                position=position.copy(),
                importance=ENCOUNTER_IMPORTANCE[outcome],
                peer_id=peer_id,
                outcome=outcome,
            )
        )

    def add_inference_memory(
        self, position: Vector2, reasoning: str, parameter_changes: str, success: bool
    ) -> bool:
        return self.add_entry(
            InferenceMemory(
                kind=MemoryEventType.INFERENCE_PERFORMED,
                position=position.copy(),
                importance=INFERENCE_SUCCESS_IMPORTANCE if success else INFERENCE_FAILURE_IMPORTANCE,
                reasoning=reasoning,
                parameter_changes=parameter_changes,
                success=success,
            )
        )

    def clear(self) -> None:
        self._entries = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> List[MemoryEntry]:
        return list(self._entries)

    def by_kind(self, kind: MemoryEventType) -> List[MemoryEntry]:
        return [entry for entry in self._entries if entry.kind is kind]

    def nearest(self, position: Vector2, kind: MemoryEventType) -> Optional[MemoryEntry]:
        """Closest entry of ``kind`` to ``position`` (Euclidean), or None."""
        candidates = self.by_kind(kind)
        if not candidates:
            return None
        return min(candidates, key=lambda entry: entry.position.distance_squared_to(position))

    def within_radius(self, position: Vector2, radius: float) -> List[MemoryEntry]:
        radius_sq = radius * radius
        return [e for e in self._entries if e.position.distance_squared_to(position) <= radius_sq]

    def recent(self, time_window: float) -> List[MemoryEntry]:
        """Entries whose timestamp falls within ``time_window`` of the current time."""
        cutoff = self._current_time - time_window
        return [e for e in self._entries if e.timestamp is not None and e.timestamp >= cutoff]

    def most_recent(self, kind: MemoryEventType, limit: int) -> List[MemoryEntry]:
        """Up to ``limit`` entries of ``kind``, newest first."""
        entries = sorted(self.by_kind(kind), key=lambda e: (e.timestamp or 0.0, e.sequence), reverse=True)
        return entries[:limit]

    def latest_inference(self) -> Optional[InferenceMemory]:
        entries = self.most_recent(MemoryEventType.INFERENCE_PERFORMED, 1)
        return entries[0] if entries else None  # type: ignore[return-value]

    def snapshot(self) -> List[Dict[str, object]]:
        return [entry.to_dict() for entry in self._entries]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _recent_entries(self) -> List[MemoryEntry]:
        window = math.ceil(self.capacity * RECENT_WINDOW_FRACTION)
        return sorted(self._entries, key=lambda e: e.sequence)[-window:]

    def _is_duplicate(self, entry: MemoryEntry) -> bool:
        if entry.kind is MemoryEventType.INFERENCE_PERFORMED:
            return False

        threshold = FOOD_DEDUP_DISTANCE if entry.kind in FOOD_KINDS else DEDUP_DISTANCE
        threshold_sq = threshold * threshold

        for existing in self._recent_entries():
            if existing.kind is not entry.kind:
                continue
            if existing.position.distance_squared_to(entry.position) >= threshold_sq:
                continue
            if isinstance(entry, TerrainMemory) and isinstance(existing, TerrainMemory):
                if entry.terrain is existing.terrain:
                    return True
            elif isinstance(entry, EncounterMemory) and isinstance(existing, EncounterMemory):
                if entry.peer_id == existing.peer_id:
                    return True
            else:
                return True
        return False

    def _prune(self) -> None:
        if len(self._entries) <= self.capacity:
            return

        excess = len(self._entries) - self.capacity
        # Oldest first among equal importance
        self._entries.sort(key=lambda e: (e.importance, e.timestamp or 0.0, e.sequence))
        dropped = self._entries[:excess]
        self._entries = self._entries[excess:]
        logger.debug("Pruned %d memories (lowest importance %.2f)", len(dropped), dropped[0].importance)

        self._entries.sort(key=_retention_key)


class _RetentionOrder:
    """Sort key: importance first when it differs meaningfully, else recency."""

    __slots__ = ("entry",)

    def __init__(self, entry: MemoryEntry) -> None:
        self.entry = entry

    def __lt__(self, other: "_RetentionOrder") -> bool:
        a, b = self.entry, other.entry
        if abs(a.importance - b.importance) > REORDER_IMPORTANCE_GAP:
            return a.importance > b.importance
        return (a.timestamp or 0.0) > (b.timestamp or 0.0)


def _retention_key(entry: MemoryEntry) -> _RetentionOrder:
    return _RetentionOrder(entry)
