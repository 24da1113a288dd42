"""Tick loop configuration constants."""

# Default simulation step for headless runs (seconds of simulation time)
DEFAULT_TICK_DT = 1.0 / 30.0

# Larger steps are clamped so a stalled caller cannot teleport sparklings
MAX_TICK_DT = 0.5

# Headless runner defaults
DEFAULT_HEADLESS_TICKS = 3000
DEFAULT_STATS_INTERVAL = 300
