"""Population control configuration constants."""

INITIAL_SPARKLING_COUNT = 12
MIN_SPARKLING_COUNT = 5
MAX_SPARKLING_COUNT = 30
AUTO_POPULATION_CONTROL = True

# Replacement inheritance
REPLACEMENT_BLEND_RATIO = 0.5
REPLACEMENT_VARIATION = 0.1
PROFILE_VARIATION = 0.2

# Spawn margin from the world edge for new sparklings (world units)
SPAWN_MARGIN = 20.0
