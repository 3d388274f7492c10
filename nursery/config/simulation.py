"""Trough simulator and solver tunables."""

# Hard stop for the trough simulator (100 days). Reaching it yields a
# best-effort result flagged ``horizon_reached``.
SIMULATION_HORIZON_SECONDS = 100 * 24 * 60 * 60

# Absolute time tolerance when comparing event times (seconds).
TIME_EPSILON = 1e-9

# Point tolerance when deciding a stack is empty.
POINT_EPSILON = 1e-9

# Daily food breakdown.
SECONDS_PER_DAY = 86400
MAX_FOOD_BANDS = 100

# Hand-feed threshold bisection steps (2**-50 of the baby band is plenty).
HAND_FEED_SEARCH_STEPS = 50
