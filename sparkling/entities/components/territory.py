"""Advisory territory claims."""

from dataclasses import dataclass
from typing import Dict, Optional

from sparkling.math_utils import Vector2
from sparkling.parameters import DecisionParameters

SATIATION_FRACTION = 0.8
RECLAIM_DISTANCE_FACTOR = 1.5
RADIUS_SCALE = 5.0


@dataclass
class Territory:
    center: Vector2
    radius: float

    def contains(self, point: Vector2) -> bool:
        """Strict circular containment."""
        return self.center.distance_squared_to(point) < self.radius * self.radius

    def to_dict(self) -> Dict[str, object]:
        return {"center": self.center.to_dict(), "radius": self.radius}


def territory_radius(params: DecisionParameters) -> float:
    """Less cooperative sparklings claim larger areas."""
    return params.personal_space_factor * (2.0 - params.cooperation_tendency) * RADIUS_SCALE


class TerritoryComponent:
    """Tracks the current claim and when to move it."""

    def __init__(self) -> None:
        self._territory: Optional[Territory] = None

    @property
    def territory(self) -> Optional[Territory]:
        return self._territory

    def should_claim(self, position: Vector2, food_ratio: float, params: DecisionParameters) -> bool:
        if food_ratio <= params.food_satiation_threshold * SATIATION_FRACTION:
            return False
        if self._territory is None:
            return True
        return position.distance_to(self._territory.center) > self._territory.radius * RECLAIM_DISTANCE_FACTOR

    def claim(self, position: Vector2, params: DecisionParameters) -> Territory:
        self._territory = Territory(center=position.copy(), radius=territory_radius(params))
        return self._territory

    def contains(self, point: Vector2) -> bool:
        return self._territory is not None and self._territory.contains(point)
