"""World grid and resource spawning configuration constants."""

# World dimensions in world units
WORLD_WIDTH = 1000
WORLD_HEIGHT = 800

# Side length of one grid cell in world units
GRID_CELL_SIZE = 20

# Terrain coverage targets (fraction of cells) and clustering strength.
# Higher cluster factor = larger contiguous patches.
WATER_PERCENTAGE = 0.15
MOUNTAIN_PERCENTAGE = 0.1
FOREST_PERCENTAGE = 0.2
DESERT_PERCENTAGE = 0.1

WATER_CLUSTER_FACTOR = 0.6
MOUNTAIN_CLUSTER_FACTOR = 0.7
FOREST_CLUSTER_FACTOR = 0.5
DESERT_CLUSTER_FACTOR = 0.4

# Initial resource seeding (probability and quantity scale with terrain multipliers)
INITIAL_FOOD_CHANCE = 0.15
INITIAL_FOOD_SCALE = 10
INITIAL_ENERGY_CHANCE = 0.1
INITIAL_ENERGY_SCALE = 5

# Periodic spawning: per-cell chance per second, adjusted by population size.
# The per-sparkling adjustment is negative so crowded worlds grow less.
RESOURCE_SPAWN_RATE = 0.0003
RESOURCE_SPAWN_RATE_PER_SPARKLING = -0.0000025
SPAWN_FOOD_SCALE = 5
SPAWN_ENERGY_SCALE = 2
