"""Trough simulation.

Predicts how long a shared food container keeps a group of growing
creatures fed, and how much of the food is eaten versus lost to spoilage.

Model:
    - Every physical stack has its own spoil deadline
      (``food.spoil_seconds * config.spoil_multiplier`` after the trough is
      filled). Whatever is left of a stack at its deadline rots at once.
    - Each creature group eats from the edible stack closest to its
      deadline (ties: the smaller stack, then fill order).
    - A group's appetite falls linearly until adulthood, then stays at the
      adult rate, so the combined draw on any stack is piecewise linear.

Instead of ticking second by second, the simulator jumps straight to the
next event (a stack spoils, a stack is emptied, a group becomes adult) and
solves the depletion in closed form. Food eaten in the same instant it
would spoil counts as eaten.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from nursery.config import NurseryConfig
from nursery.config.rates import GROWTH_FILL_FACTOR
from nursery.config.simulation import POINT_EPSILON, SIMULATION_HORIZON_SECONDS, TIME_EPSILON
from nursery.exceptions import InvalidInput
from nursery.maturation import food_rates
from nursery.math_utils import linear_depletion_time, linear_integral
from nursery.stats import FoodStack, FoodStats, RateSettings, TroughConfig, TroughEntry

logger = logging.getLogger(__name__)


class LimitReason(str, Enum):
    """Which constraint ends the food supply first."""

    SPOILAGE = "spoilage"
    CONSUMPTION = "consumption"
    CAPACITY = "capacity"


class TroughEventKind(str, Enum):
    CONSUMED = "consumed"
    SPOILED = "spoiled"
    MATURED = "matured"


@dataclass(frozen=True)
class TroughEvent:
    """One step of the simulation timeline (for breakdown views)."""

    time: float
    kind: TroughEventKind
    name: str
    points: float = 0.0


@dataclass(frozen=True)
class TroughResult:
    """Outcome of one trough simulation.

    ``eaten_points + spoiled_points + remaining_points == total_points``;
    ``remaining_points`` is only non-zero when ``horizon_reached``.
    """

    duration_seconds: float
    eaten_points: float
    spoiled_points: float
    total_points: float
    remaining_points: float = 0.0
    eaten_items: float = 0.0
    spoiled_items: float = 0.0
    limited_by: Optional[LimitReason] = None
    horizon_reached: bool = False
    events: Tuple[TroughEvent, ...] = field(default_factory=tuple)

    @property
    def waste_fraction(self) -> float:
        return self.spoiled_points / self.total_points if self.total_points > 0 else 0.0


EMPTY_RESULT = TroughResult(duration_seconds=0.0, eaten_points=0.0, spoiled_points=0.0, total_points=0.0)


@dataclass
class _Stack:
    food: FoodStats
    points: float
    deadline: float
    order: int

    @property
    def label(self) -> str:
        return f"{self.food.name} #{self.order + 1}"


class GroupAppetite:
    """A trough entry's combined appetite as a piecewise linear function."""

    __slots__ = ("entry", "adult_at", "_start_rate", "_decay", "_fill", "_adult_rate")

    def __init__(self, entry: TroughEntry, settings: RateSettings) -> None:
        rates = food_rates(entry.species, settings)
        scale = entry.quantity / settings.nursing_multiplier
        clock_seconds = entry.maturation * rates.maturation_seconds

        self.entry = entry
        self.adult_at = max(0.0, rates.maturation_seconds - clock_seconds)
        self._start_rate = rates.rate_at(clock_seconds) * scale
        self._decay = rates.decay * scale
        self._adult_rate = rates.min_rate * scale
        fill = 0.0
        if entry.max_food_override:
            fill = GROWTH_FILL_FACTOR * entry.max_food_override / rates.maturation_seconds
        self._fill = fill * scale

    def rate_and_slope(self, t: float) -> Tuple[float, float]:
        """Draw in points/second at ``t`` and its slope until the next breakpoint."""
        if t < self.adult_at - TIME_EPSILON:
            return self._start_rate - self._decay * t + self._fill, -self._decay
        return self._adult_rate, 0.0

    def is_growing(self, t: float) -> bool:
        return t < self.adult_at - TIME_EPSILON

    def points_over(self, seconds: float) -> float:
        """Points this group eats during the first ``seconds`` of the run."""
        if seconds <= 0:
            return 0.0
        growing = min(seconds, self.adult_at)
        points = linear_integral(self._start_rate + self._fill, -self._decay, growing)
        return points + self._adult_rate * (seconds - growing)


def _expand_stacks(stacks: Sequence[FoodStack], config: TroughConfig) -> List[_Stack]:
    """Split stack counts into physical stacks; fractions become a partial stack."""
    physical: List[_Stack] = []
    for stack in stacks:
        if stack.stack_count <= 0:
            continue
        food = stack.food
        food.validate()
        deadline = config.effective_spoil_seconds(food)
        full = int(math.floor(stack.stack_count))
        item_counts = [food.stack_size] * full
        partial_items = int(math.floor((stack.stack_count - full) * food.stack_size + 1e-9))
        if partial_items > 0:
            item_counts.append(partial_items)
        for items in item_counts:
            physical.append(_Stack(food, items * food.food_value, deadline, len(physical)))
    return physical


def simulate_trough(
    entries: Sequence[TroughEntry],
    stacks: Sequence[FoodStack],
    config: TroughConfig,
    settings: RateSettings,
    horizon_seconds: Optional[float] = None,
    tunables: Optional[NurseryConfig] = None,
) -> TroughResult:
    """Run the trough until every stack is eaten or spoiled.

    Args:
        entries: Creature groups sharing the trough.
        stacks: Food placed in the trough at time zero.
        config: Container (spoil multiplier; capacity is not enforced here).
        settings: Server rates.
        horizon_seconds: Safety horizon; the run stops there with a
            best-effort result. Defaults to ``tunables.horizon_seconds``.
        tunables: Runtime configuration; ``SIMULATION_HORIZON_SECONDS``
            applies when neither this nor ``horizon_seconds`` is given.

    Returns:
        A ``TroughResult``; zeroed when there are no creatures or no food.
    """
    if horizon_seconds is None:
        horizon_seconds = tunables.horizon_seconds if tunables else SIMULATION_HORIZON_SECONDS
    if horizon_seconds <= 0:
        raise InvalidInput(f"horizon_seconds must be positive, got {horizon_seconds}")
    settings.validate()
    if not entries:
        return EMPTY_RESULT

    physical = _expand_stacks(stacks, config)
    total_points = sum(s.points for s in physical)
    if not physical:
        return EMPTY_RESULT

    consumers = [GroupAppetite(entry, settings) for entry in entries]
    events: List[TroughEvent] = []
    eaten_points = spoiled_points = 0.0
    eaten_items = spoiled_items = 0.0
    t = 0.0
    horizon_reached = False

    while True:
        live = [s for s in physical if s.points > POINT_EPSILON]
        if not live:
            break
        if t >= horizon_seconds - TIME_EPSILON:
            horizon_reached = True
            break

        live.sort(key=lambda s: (s.deadline, s.points, s.order))

        # Who eats from which stack during this segment.
        draw: Dict[int, List[float]] = {}
        next_event = horizon_seconds
        for consumer in consumers:
            target = next((s for s in live if consumer.entry.eats(s.food.name)), None)
            if target is None:
                continue
            rate, slope = consumer.rate_and_slope(t)
            bucket = draw.setdefault(target.order, [0.0, 0.0])
            bucket[0] += rate
            bucket[1] += slope
            if consumer.is_growing(t):
                next_event = min(next_event, consumer.adult_at)

        for stack in live:
            next_event = min(next_event, stack.deadline)

        exhaust_at: Dict[int, float] = {}
        for stack in live:
            if stack.order in draw:
                rate, slope = draw[stack.order]
                finish = t + linear_depletion_time(stack.points, rate, slope)
                exhaust_at[stack.order] = finish
                next_event = min(next_event, finish)

        dt = max(0.0, next_event - t)

        for stack in live:
            if stack.order not in draw:
                continue
            if exhaust_at[stack.order] <= next_event + TIME_EPSILON:
                eaten = stack.points
            else:
                rate, slope = draw[stack.order]
                eaten = min(stack.points, linear_integral(rate, slope, dt))
            stack.points -= eaten
            if stack.points <= POINT_EPSILON:
                eaten += stack.points
                stack.points = 0.0
                events.append(TroughEvent(next_event, TroughEventKind.CONSUMED, stack.label))
            eaten_points += eaten
            eaten_items += eaten / stack.food.food_value

        for stack in live:
            if stack.points > 0 and stack.deadline <= next_event + TIME_EPSILON:
                spoiled_points += stack.points
                spoiled_items += stack.points / stack.food.food_value
                events.append(TroughEvent(next_event, TroughEventKind.SPOILED, stack.label, stack.points))
                stack.points = 0.0

        for consumer in consumers:
            if consumer.is_growing(t) and not consumer.is_growing(next_event):
                events.append(
                    TroughEvent(next_event, TroughEventKind.MATURED, consumer.entry.species.name)
                )

        t = next_event

    remaining_points = sum(s.points for s in physical)
    if horizon_reached:
        logger.warning(
            "Trough simulation hit the %.0fs horizon with %.1f points left", horizon_seconds, remaining_points
        )

    result = TroughResult(
        duration_seconds=t,
        eaten_points=eaten_points,
        spoiled_points=spoiled_points,
        total_points=total_points,
        remaining_points=remaining_points,
        eaten_items=eaten_items,
        spoiled_items=spoiled_items,
        limited_by=LimitReason.SPOILAGE if spoiled_points > POINT_EPSILON else LimitReason.CONSUMPTION,
        horizon_reached=horizon_reached,
        events=tuple(events),
    )
    logger.debug(
        "Trough: %d groups, %d stacks lasted %.0fs (eaten %.1f, spoiled %.1f)",
        len(entries),
        len(physical),
        result.duration_seconds,
        eaten_points,
        spoiled_points,
    )
    return result
