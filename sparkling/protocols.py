"""Capability protocols used at component seams.

Components receive the narrow capability they need instead of a whole
sparkling or the whole world. Systems check capabilities structurally:

    if isinstance(entity, Competitor):
        entity.apply_competition_penalty(0.5, 5.0)

Protocol overview:
    WorldView - grid lookups, terrain and collection used by components
    InferenceHost - what the inference controller needs from its owner
    Competitor - what the competition resolver needs from an entity
"""

from typing import TYPE_CHECKING, Iterator, Optional, Protocol, Tuple, runtime_checkable

if TYPE_CHECKING:
    from sparkling.entities.components.territory import Territory
    from sparkling.inference.types import InferenceContext, InferenceResult
    from sparkling.math_utils import Vector2
    from sparkling.memory import EncounterOutcome
    from sparkling.parameters import DecisionParameters
    from sparkling.state_machine import BehaviorState
    from sparkling.terrain import TerrainProperties
    from sparkling.world import GridCell


@runtime_checkable
class WorldView(Protocol):
    """Read and collect access to the world grid."""

    def get_cell(self, x: float, y: float) -> Optional["GridCell"]: ...

    def terrain_properties_at(self, x: float, y: float) -> Optional["TerrainProperties"]: ...

    def cells_in_radius(self, position: "Vector2", radius_cells: int) -> Iterator[Tuple["GridCell", float]]: ...

    def cell_center(self, cell: "GridCell") -> "Vector2": ...

    def clamp_position(self, position: "Vector2") -> None: ...

    def collect_food(self, x: float, y: float, amount: float) -> float: ...

    def collect_neural_energy(self, x: float, y: float, amount: float) -> float: ...


@runtime_checkable
class InferenceHost(Protocol):
    """Owner of an inference controller."""

    @property
    def neural_energy(self) -> float: ...

    @property
    def parameters(self) -> "DecisionParameters": ...

    def spend_neural_energy(self, amount: float) -> float: ...

    def build_inference_context(self) -> "InferenceContext": ...

    def apply_inference_result(self, result: "InferenceResult") -> str: ...


@runtime_checkable
class Competitor(Protocol):
    """An entity the competition resolver can pair with others."""

    @property
    def id(self) -> int: ...

    @property
    def position(self) -> "Vector2": ...

    @property
    def state(self) -> "BehaviorState": ...

    @property
    def parameters(self) -> "DecisionParameters": ...

    @property
    def territory(self) -> Optional["Territory"]: ...

    def is_active(self) -> bool: ...

    def apply_competition_penalty(self, magnitude: float, duration: float) -> None: ...

    def record_encounter(self, peer_id: int, peer_position: "Vector2", outcome: "EncounterOutcome") -> bool: ...
