"""Simulation orchestration."""

from sparkling.simulation.engine import SimulationEngine, TickResult

__all__ = ["SimulationEngine", "TickResult"]
