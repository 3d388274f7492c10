"""Creature maturation clock and trough planner.

Pure computation core with no network or UI dependencies. Key modules:

- maturation: growth time, appetite, food buffers and breakdowns
- session_clock: immutable per-creature maturation clock
- tracker: session service folding in rate changes and server downtime
- trough: event-driven trough depletion simulator
- efficiency: inverse planner (stacks for a duration, smart fill)
- catalog: validated species/food catalog loaded once

This module exposes a small, explicit public API via ``__all__``. Import
helpers directly from the submodules.
"""

from nursery.catalog import Catalog
from nursery.efficiency import stacks_for_duration, trough_efficiency
from nursery.exceptions import NurseryError
from nursery.session_clock import SessionClock
from nursery.tracker import SessionTracker
from nursery.trough import simulate_trough

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "NurseryError",
    "SessionClock",
    "SessionTracker",
    "simulate_trough",
    "stacks_for_duration",
    "trough_efficiency",
]
