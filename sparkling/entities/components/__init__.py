"""Narrow components composed into a sparkling."""

from sparkling.entities.components.collection import CollectionComponent, CollectionOutcome
from sparkling.entities.components.inference_controller import InferenceController
from sparkling.entities.components.movement import MovementComponent
from sparkling.entities.components.perception import PerceptionComponent
from sparkling.entities.components.reserves import ResourceReserves
from sparkling.entities.components.territory import Territory, TerritoryComponent

__all__ = [
    "CollectionComponent",
    "CollectionOutcome",
    "InferenceController",
    "MovementComponent",
    "PerceptionComponent",
    "ResourceReserves",
    "Territory",
    "TerritoryComponent",
]
