"""Cross-entity systems run by the simulation engine once per tick."""

from sparkling.systems.base import BaseSystem, SystemResult
from sparkling.systems.competition import CompetitionSystem, ContestResult, competitive_advantage
from sparkling.systems.population import PopulationSystem, inherit_parameters
from sparkling.systems.resource_spawning import ResourceSpawningSystem

__all__ = [
    "BaseSystem",
    "CompetitionSystem",
    "ContestResult",
    "PopulationSystem",
    "ResourceSpawningSystem",
    "SystemResult",
    "competitive_advantage",
    "inherit_parameters",
]
