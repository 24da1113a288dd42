"""Sparkling Field exception hierarchy.

Centralised base classes so callers can catch narrowly and failures
become easier to diagnose. Nothing in the tick path is allowed to let one
of these escape; they exist for configuration time and for the inference
layer, which converts them into failed results.
"""


class SparklingError(Exception):
    """Root of all Sparkling Field domain exceptions."""


class ConfigurationError(SparklingError):
    """Invalid or missing configuration."""


class SimulationError(SparklingError):
    """Errors during simulation execution (engine, systems, entities)."""


class InferenceError(SparklingError):
    """An inference call failed (transport, upstream status, empty body)."""


class ResponseParseError(InferenceError):
    """The reasoning response could not be turned into parameter updates."""
