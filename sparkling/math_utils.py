"""Vector math for positions and velocities.

Sparklings and the world hand out copies of their vectors, so a caller can
never move an entity by mutating a returned position.
"""

from __future__ import annotations

import math

# Coordinates closer than this compare equal
EPSILON = 1e-9


class Vector2:
    """Mutable 2D vector; arithmetic returns new vectors."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)

    @staticmethod
    def from_angle(angle: float, magnitude: float = 1.0) -> Vector2:
        return Vector2(magnitude * math.cos(angle), magnitude * math.sin(angle))

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Vector2:
        return Vector2(self.x / scalar, self.y / scalar)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2):
            return NotImplemented
        return abs(self.x - other.x) < EPSILON and abs(self.y - other.y) < EPSILON

    def __hash__(self) -> int:
        return hash((round(self.x, 9), round(self.y, 9)))

    def __repr__(self) -> str:
        return f"Vector2({self.x}, {self.y})"

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def distance_to(self, other: Vector2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_squared_to(self, other: Vector2) -> float:
        dx, dy = self.x - other.x, self.y - other.y
        return dx * dx + dy * dy

    def angle(self) -> float:
        """Heading in radians, ``atan2(y, x)``."""
        return math.atan2(self.y, self.x)

    def scaled_to(self, magnitude: float) -> Vector2:
        """Same direction with the given length; the zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vector2()
        return self * (magnitude / length)

    def update(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def copy(self) -> Vector2:
        return Vector2(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
