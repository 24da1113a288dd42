"""Sparkling entity and its behavior controller."""

from sparkling.entities.behavior import BehaviorController
from sparkling.entities.sparkling import Sparkling

__all__ = ["BehaviorController", "Sparkling"]
