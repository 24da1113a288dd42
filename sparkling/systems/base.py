"""Shared plumbing for the engine's cross-entity systems.

The engine runs each system once per tick, in registration order, after
every sparkling has updated. Subclasses implement :meth:`BaseSystem._do_update`
and report what they did through a :class:`SystemResult`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from sparkling.simulation.engine import SimulationEngine


@dataclass
class SystemResult:
    """Per-tick report from one system.

    ``details`` holds system-specific counters such as ``{"contests": 2}``.
    """

    entities_affected: int = 0
    entities_spawned: int = 0
    entities_removed: int = 0
    skipped: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def skipped_result() -> "SystemResult":
        return SystemResult(skipped=True)


class BaseSystem(ABC):
    """A named, switchable per-tick pass over the population."""

    def __init__(self, engine: Optional["SimulationEngine"], name: str) -> None:
        self._engine = engine
        self._name = name
        self.enabled = True
        self._update_count = 0
        self._totals = {"affected": 0, "spawned": 0, "removed": 0}

    @property
    def name(self) -> str:
        return self._name

    @property
    def engine(self) -> Optional["SimulationEngine"]:
        return self._engine

    @property
    def update_count(self) -> int:
        return self._update_count

    def update(self, dt: float) -> SystemResult:
        if not self.enabled:
            return SystemResult.skipped_result()

        result = self._do_update(dt) or SystemResult()
        self._update_count += 1
        self._totals["affected"] += result.entities_affected
        self._totals["spawned"] += result.entities_spawned
        self._totals["removed"] += result.entities_removed
        return result

    @abstractmethod
    def _do_update(self, dt: float) -> Optional[SystemResult]:
        """Run one tick of this system."""

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "enabled": self.enabled,
            "update_count": self._update_count,
            "totals": dict(self._totals),
        }
