"""Configuration package for the Sparkling Field simulation.

Constants are grouped by concern (world, sparklings, inference,
population) and aggregated into dataclasses by ``simulation_config``.
"""
