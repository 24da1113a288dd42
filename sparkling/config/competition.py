"""Competition and encounter configuration constants."""

ENCOUNTER_RADIUS = 30.0
COMPETITION_RADIUS = 20.0

# Penalty for the loser of a contest
LOSER_PENALTY = 0.5
LOSER_PENALTY_DURATION = 5.0

# Penalty applied to both sides of an exact tie
TIE_PENALTY = 0.3
TIE_PENALTY_DURATION = 3.0

# Advantage multiplier bonus for a sparkling contesting inside its own territory.
# 0.0 keeps territory purely advisory.
TERRITORIAL_ADVANTAGE_BONUS = 0.0
