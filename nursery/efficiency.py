"""Trough efficiency planning.

The inverse of ``nursery.trough``: instead of asking how long a given stock
lasts, ask how much stock a roster needs.

- ``max_stacks_before_waste``: the "smart fill" amount; every item is eaten
  before its stack's spoil deadline.
- ``stacks_for_duration``: stock for a target duration within one
  container, or a structured explanation of why it cannot be done
  (``LimitReason.SPOILAGE`` / ``LimitReason.CAPACITY``) with the number of
  containers or refills it would take instead.

Consumption is integrated over each group's appetite curve, so a roster
that grows up during the window is not over-provisioned.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from nursery.config.simulation import TIME_EPSILON
from nursery.exceptions import InvalidInput
from nursery.maturation import food_for_period, total_maturation_seconds
from nursery.math_utils import linear_depletion_time
from nursery.stats import FoodStats, RateSettings, TroughEntry
from nursery.trough import GroupAppetite, LimitReason

logger = logging.getLogger(__name__)

# Slack when rounding stack counts so exact fits are not bumped up a stack.
_STACK_TOLERANCE = 1e-9


@dataclass(frozen=True)
class TroughEfficiency:
    """Smart-fill recommendation for one food.

    Attributes:
        max_stacks: Largest whole stack count with no spoilage.
        points_per_second: Combined draw of the roster right now.
        items_per_second: The same draw in items of this food.
        recommended_items: ``max_stacks`` expressed in items.
    """

    max_stacks: int
    points_per_second: float
    items_per_second: float
    recommended_items: int


@dataclass(frozen=True)
class StackPlan:
    """Stock plan for a target duration.

    Attributes:
        stacks: Stacks to put in one container.
        total_stacks: Stacks the whole duration needs.
        is_achievable: One container covers the duration.
        limit_reason: Why it is not achievable (``None`` when it is).
        max_duration: Longest duration one full container covers (seconds).
        troughs_needed: Containers needed side by side.
        refills_needed: Refills of one container needed instead.
        wastes_food: The stock exceeds ``max_stacks_before_waste``; the excess
            rots before it is eaten (reported, not rejected).
    """

    stacks: int
    total_stacks: int
    is_achievable: bool
    limit_reason: Optional[LimitReason]
    max_duration: float
    troughs_needed: int
    refills_needed: int = 0
    wastes_food: bool = False


EMPTY_PLAN = StackPlan(
    stacks=0,
    total_stacks=0,
    is_achievable=False,
    limit_reason=None,
    max_duration=0.0,
    troughs_needed=0,
)


def _appetites(entries: Sequence[TroughEntry], settings: RateSettings) -> List[GroupAppetite]:
    settings.validate()
    return [GroupAppetite(entry, settings) for entry in entries]


def _whole_stacks(points: float, food: FoodStats, round_up: bool) -> int:
    stacks = points / food.points_per_stack
    if round_up:
        return int(math.ceil(stacks - _STACK_TOLERANCE))
    return int(math.floor(stacks + _STACK_TOLERANCE))


def combined_rate(entries: Sequence[TroughEntry], settings: RateSettings) -> float:
    """Combined draw of every creature right now, in points/second."""
    return sum(appetite.rate_and_slope(0.0)[0] for appetite in _appetites(entries, settings))


def points_consumed(entries: Sequence[TroughEntry], settings: RateSettings, seconds: float) -> float:
    """Points the roster eats over the next ``seconds`` seconds."""
    return sum(appetite.points_over(seconds) for appetite in _appetites(entries, settings))


def time_to_consume(entries: Sequence[TroughEntry], settings: RateSettings, points: float) -> float:
    """Seconds until the roster has eaten ``points`` (no spoilage)."""
    appetites = _appetites(entries, settings)
    if points <= 0:
        return 0.0
    if not appetites:
        return math.inf

    # Walk the segments between adulthood breakpoints; each is linear.
    breakpoints = sorted({a.adult_at for a in appetites if a.adult_at > 0} | {math.inf})
    t = 0.0
    left = points
    for end in breakpoints:
        rate = slope = 0.0
        for appetite in appetites:
            r, s = appetite.rate_and_slope(t)
            rate += r
            slope += s
        span = end - t
        segment = math.inf if math.isinf(span) else rate * span + 0.5 * slope * span * span
        if left <= segment:
            return t + linear_depletion_time(left, rate, slope)
        left -= segment
        t = end
    return math.inf


def max_stacks_before_waste(
    entries: Sequence[TroughEntry],
    food: FoodStats,
    spoil_multiplier: float,
    settings: RateSettings,
) -> int:
    """Largest stack count the roster finishes before it spoils."""
    food.validate()
    if not spoil_multiplier > 0:
        raise InvalidInput(f"spoil_multiplier must be positive, got {spoil_multiplier}")
    if not entries:
        return 0
    effective_spoil = food.spoil_seconds * spoil_multiplier
    return _whole_stacks(points_consumed(entries, settings, effective_spoil), food, round_up=False)


def trough_efficiency(
    entries: Sequence[TroughEntry],
    food: FoodStats,
    spoil_multiplier: float,
    settings: RateSettings,
) -> TroughEfficiency:
    max_stacks = max_stacks_before_waste(entries, food, spoil_multiplier, settings)
    points_per_second = combined_rate(entries, settings)
    return TroughEfficiency(
        max_stacks=max_stacks,
        points_per_second=points_per_second,
        items_per_second=points_per_second / food.food_value,
        recommended_items=max_stacks * food.stack_size,
    )


def stacks_for_duration(
    entries: Sequence[TroughEntry],
    food: FoodStats,
    spoil_multiplier: float,
    settings: RateSettings,
    desired_seconds: float,
    ceiling: Optional[int] = None,
) -> StackPlan:
    """Plan stock for ``desired_seconds`` of feeding.

    Args:
        entries: Creature groups sharing the container.
        food: The food to stock.
        spoil_multiplier: Container spoilage modifier.
        settings: Server rates.
        desired_seconds: Target duration.
        ceiling: Whole stacks one container holds (``None`` = unlimited);
            see ``TroughConfig.stack_ceiling``.

    Returns:
        A ``StackPlan``. Infeasible targets are a normal result with
        ``is_achievable=False`` and a ``limit_reason``.
    """
    if desired_seconds < 0:
        raise InvalidInput(f"desired_seconds cannot be negative, got {desired_seconds}")
    if ceiling is not None and ceiling < 0:
        raise InvalidInput(f"ceiling cannot be negative, got {ceiling}")
    food.validate()
    if not spoil_multiplier > 0:
        raise InvalidInput(f"spoil_multiplier must be positive, got {spoil_multiplier}")
    if not entries or combined_rate(entries, settings) <= 0:
        return EMPTY_PLAN

    effective_spoil = food.spoil_seconds * spoil_multiplier
    waste_limit = max_stacks_before_waste(entries, food, spoil_multiplier, settings)
    required = _whole_stacks(points_consumed(entries, settings, desired_seconds), food, round_up=True)

    if ceiling is None:
        capacity_seconds = math.inf
    else:
        capacity_seconds = time_to_consume(entries, settings, ceiling * food.points_per_stack)
    max_duration = min(effective_spoil, capacity_seconds)
    if settings.stasis_mode and max_duration >= effective_spoil:
        # Stasis food must be used up strictly before it spoils.
        max_duration = math.nextafter(effective_spoil, 0.0)

    def refills() -> int:
        if max_duration <= 0:
            return 0
        return max(0, int(math.ceil(desired_seconds / max_duration - TIME_EPSILON)) - 1)

    if settings.stasis_mode:
        outlives_food = desired_seconds >= effective_spoil
    else:
        outlives_food = desired_seconds > effective_spoil
    if outlives_food:
        # More containers rot just as fast; only refills help.
        until_spoiled = _whole_stacks(
            points_consumed(entries, settings, effective_spoil), food, round_up=True
        )
        stacks = until_spoiled if ceiling is None else min(ceiling, until_spoiled)
        logger.debug(
            "%.0fs of %s outlives its %.0fs spoil time; %d refills needed",
            desired_seconds,
            food.name,
            effective_spoil,
            refills(),
        )
        return StackPlan(
            stacks=stacks,
            total_stacks=required,
            is_achievable=False,
            limit_reason=LimitReason.SPOILAGE,
            max_duration=max_duration,
            troughs_needed=1,
            refills_needed=refills(),
            wastes_food=stacks > waste_limit,
        )

    if ceiling is not None and required > ceiling:
        troughs = int(math.ceil(required / ceiling)) if ceiling > 0 else 0
        return StackPlan(
            stacks=ceiling,
            total_stacks=required,
            is_achievable=False,
            limit_reason=LimitReason.CAPACITY,
            max_duration=max_duration,
            troughs_needed=troughs,
            refills_needed=refills(),
            wastes_food=ceiling > waste_limit,
        )

    stacks = max(1, required)
    if ceiling is not None:
        stacks = min(stacks, ceiling)
    return StackPlan(
        stacks=stacks,
        total_stacks=stacks,
        is_achievable=True,
        limit_reason=None,
        max_duration=max_duration,
        troughs_needed=1,
        wastes_food=stacks > waste_limit,
    )


def total_food_to_adult(
    entries: Sequence[TroughEntry], food: FoodStats, settings: RateSettings
) -> int:
    """Items needed to raise every creature to adulthood, ignoring spoilage."""
    food.validate()
    points = 0.0
    for entry in entries:
        total = total_maturation_seconds(entry.species, settings)
        grown = total * entry.maturation
        if grown >= total:
            continue
        points += food_for_period(grown, total, entry.species, settings) * entry.quantity
    return int(math.ceil(points / food.food_value - _STACK_TOLERANCE))
