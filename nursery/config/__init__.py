"""Configuration package for the nursery core.

Constants are grouped by concern:

- rates: default server rates and growth-curve constants
- troughs: container presets (spoil multiplier and capacity)
- simulation: trough simulator and solver tunables

``NurseryConfig`` bundles the tunables that embedding applications commonly
override, with ``from_env()`` reading ``NURSERY_*`` variables.
"""

from nursery.config.settings import NurseryConfig

__all__ = ["NurseryConfig"]
