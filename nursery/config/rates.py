"""Server rate defaults and growth-curve constants.

The official servers run every multiplier at 1.0 outside of events;
community servers commonly boost maturation and hatching.
"""

# =============================================================================
# SERVER RATES
# =============================================================================
DEFAULT_MATURATION_SPEED = 1.0
DEFAULT_HATCH_SPEED = 1.0
DEFAULT_CONSUMPTION_SPEED = 1.0
DEFAULT_NURSING_MULTIPLIER = 1.0  # 1.0 = no caretaker bonus
DEFAULT_LOSS_FACTOR = 0.0  # Percent extra food budgeted per day (feeding losses)

# Genesis 2 boosts: growth time halves, hatch/gestation time divides by 1.5.
GEN2_GROWTH_DIVISOR = 2.0
GEN2_HATCH_DIVISOR = 1.5

# =============================================================================
# GROWTH CURVE
# =============================================================================
# Babies are the first 10% of maturation; juveniles run to 50%.
BABY_FRACTION = 0.1
JUVENILE_FRACTION = 0.5

# Incubation speeds are expressed per 100% egg health.
INCUBATION_SCALE = 100.0

# Creatures with a raised food cap top their stomach up while they grow.
GROWTH_FILL_FACTOR = 0.75
