"""Movement component: position, velocity and target steering.

Owns the sparkling's position and velocity. Needs only a world view for
terrain cost and bounds, plus the random source for heading changes.
"""

import math
import random
from typing import Optional

from sparkling.config import sparklings as sparkling_defaults
from sparkling.math_utils import Vector2
from sparkling.protocols import WorldView

HEADING_JITTER = 0.25 * math.pi
PERSONAL_SPACE_SPEED_FACTOR = 0.5


class MovementComponent:
    """Kinematics for one sparkling.

    Attributes:
        speed: Base speed from configuration
        target: Current target position, or None while wandering
    """

    def __init__(self, world: WorldView, rng: random.Random, position: Vector2, speed: float) -> None:
        self._world = world
        self._rng = rng
        self._position = position.copy()
        self._velocity = Vector2(0.0, 0.0)
        self.speed = speed
        self.target: Optional[Vector2] = None

    @property
    def position(self) -> Vector2:
        return self._position.copy()

    @property
    def velocity(self) -> Vector2:
        return self._velocity.copy()

    def stop(self) -> None:
        self._velocity = Vector2(0.0, 0.0)

    def distance_to(self, point: Vector2) -> float:
        return self._position.distance_to(point)

    def at(self, point: Vector2, tolerance: float = sparkling_defaults.ARRIVAL_DISTANCE) -> bool:
        return self._position.distance_squared_to(point) < tolerance * tolerance

    def at_target(self) -> bool:
        return self.target is not None and self.at(self.target)

    def set_random_heading(self, novelty_preference: float) -> None:
        """Pick a new heading: uniform with probability ``novelty_preference``, else a jittered current one."""
        if self._rng.random() < novelty_preference or self._velocity.length_squared() == 0:
            angle = self._rng.random() * 2 * math.pi
        else:
            angle = self._velocity.angle() + (self._rng.random() * 2 - 1) * HEADING_JITTER
        self._velocity = Vector2.from_angle(angle, self.speed)

    def head_toward(self, point: Vector2, speed_modifier: float) -> None:
        self._velocity = (point - self._position).scaled_to(self.speed * speed_modifier)

    def steer_away(self, point: Vector2) -> None:
        """Head directly away from ``point`` at half speed."""
        offset = self._position - point
        if offset.length_squared() > 0:
            self._velocity = offset.scaled_to(self.speed * PERSONAL_SPACE_SPEED_FACTOR)

    def step(self, dt: float) -> None:
        """Advance position by velocity, slowed by terrain and clamped to the world."""
        props = self._world.terrain_properties_at(self._position.x, self._position.y)
        terrain_factor = 1.0 / props.movement_cost if props is not None else 1.0
        scale = dt * self.speed * terrain_factor * sparkling_defaults.MOVEMENT_SCALE
        self._position.x += self._velocity.x * scale
        self._position.y += self._velocity.y * scale
        self._world.clamp_position(self._position)

    def place(self, position: Vector2) -> None:
        self._position = position.copy()
        self._world.clamp_position(self._position)
