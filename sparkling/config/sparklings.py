"""Sparkling entity configuration constants."""

# Reserves
SPARKLING_MAX_FOOD = 100.0
SPARKLING_MAX_NEURAL_ENERGY = 100.0
INITIAL_FOOD_RATIO = 0.7  # Start with 70% food
INITIAL_ENERGY_RATIO = 0.3  # Start with 30% neural energy

# Movement
SPARKLING_SPEED = 3.5
SEEK_SPEED_MODIFIER = 2.5
URGENT_SEEK_SPEED_MODIFIER = 3.0
MOVEMENT_SCALE = 2.5
ARRIVAL_DISTANCE = 5.0

# Sensing: how many cells away a sparkling can see at the base exploration range
SENSOR_RADIUS_CELLS = 3
BASE_EXPLORATION_RANGE = 200.0
SENSOR_SCORE_EPSILON = 0.1

# Metabolism (units per second)
FOOD_CONSUMPTION_RATE = 0.5
MOVEMENT_FOOD_COST = 0.1
NEURAL_ENERGY_CONSUMPTION_RATE = 1.0
THINKING_ENERGY_MULTIPLIER = 3.0
CRITICAL_HUNGER_ENERGY_DRAIN = 2.0

# Collection
COLLECTION_RATE = 10.0
ENERGY_COLLECTION_FACTOR = 0.5
COLLECTING_DWELL_TIME = 1.5

# State timing
EXPLORING_DIRECTION_CHANGE_DELAY = 3.0
DIRECTION_CHANGE_BASE_CHANCE = 0.1
REST_JITTER = 0.2
HOME_FALLBACK_RATIO = 0.3
RESOURCE_CHECK_INTERVAL = 1.0
TERRAIN_CHECK_INTERVAL = 3.0

# Fade-out
FADEOUT_DURATION = 5.0

# Memory
MEMORY_CAPACITY = 20
