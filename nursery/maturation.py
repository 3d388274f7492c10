"""Maturation model: growth time, appetite and food buffers.

Pure functions over ``SpeciesStats``, ``FoodStats`` and ``RateSettings``.
Nothing here holds state; ``SessionClock`` and the trough planners call in
whenever they need a duration or a rate.

Appetite model:
    A newborn eats ``base * baby * extra_baby * consumption_speed`` points
    per second. The rate falls linearly to the adult rate
    ``base * consumption_speed`` at 100% maturation and stays there.
    A caretaker's nursing multiplier divides every rate.

Time is measured on the *maturation clock*: seconds since birth, so that
``maturation * total_maturation_seconds`` is the clock reading.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from nursery.config.rates import (
    BABY_FRACTION,
    GEN2_GROWTH_DIVISOR,
    GEN2_HATCH_DIVISOR,
    INCUBATION_SCALE,
    JUVENILE_FRACTION,
)
from nursery.config.simulation import (
    HAND_FEED_SEARCH_STEPS,
    MAX_FOOD_BANDS,
    POINT_EPSILON,
    SECONDS_PER_DAY,
    TIME_EPSILON,
)
from nursery.exceptions import InvalidInput
from nursery.math_utils import clamp, linear_depletion_time, linear_integral
from nursery.stats import BirthType, FoodStats, RateSettings, SpeciesStats

logger = logging.getLogger(__name__)


class GrowthStage(Enum):
    BABY = "baby"
    JUVENILE = "juvenile"
    ADOLESCENT = "adolescent"
    ADULT = "adult"


@dataclass(frozen=True)
class FoodRates:
    """Appetite curve for one species under one set of server rates.

    Attributes:
        max_rate: Newborn consumption (points/second).
        min_rate: Adult consumption (points/second).
        decay: Rate drop per second of maturation.
        maturation_seconds: Total maturation time.
    """

    max_rate: float
    min_rate: float
    decay: float
    maturation_seconds: float

    def rate_at(self, clock_seconds: float) -> float:
        """Raw rate at a maturation-clock reading (floored at the adult rate)."""
        return max(self.min_rate, self.max_rate - self.decay * clock_seconds)


@dataclass(frozen=True)
class HandFeedThreshold:
    fraction: float
    seconds: float

    @property
    def percent(self) -> float:
        return self.fraction * 100.0


def growth_stage(maturation: float) -> GrowthStage:
    if maturation < BABY_FRACTION:
        return GrowthStage.BABY
    if maturation < JUVENILE_FRACTION:
        return GrowthStage.JUVENILE
    if maturation < 1.0:
        return GrowthStage.ADOLESCENT
    return GrowthStage.ADULT


def _check_positive(name: str, value: float) -> None:
    if value is None or not value > 0:
        raise InvalidInput(f"{name} must be positive, got {value!r}")


# =============================================================================
# DURATIONS
# =============================================================================


def total_maturation_seconds(species: SpeciesStats, settings: RateSettings) -> float:
    """Seconds from birth to adulthood.

    Raises:
        InvalidInput: If the species' age speed or the server maturation
            multiplier is not positive.
    """
    _check_positive(f"{species.name}.age_speed", species.age_speed)
    _check_positive(f"{species.name}.age_speed_multiplier", species.age_speed_multiplier)
    _check_positive("maturation_speed", settings.maturation_speed)

    seconds = 1.0 / (species.age_speed * species.age_speed_multiplier * settings.maturation_speed)
    if settings.gen2_growth_effect:
        seconds /= GEN2_GROWTH_DIVISOR
    return seconds


def baby_seconds(species: SpeciesStats, settings: RateSettings) -> float:
    """Duration of the baby stage (the first 10% of maturation)."""
    return total_maturation_seconds(species, settings) * BABY_FRACTION


def birth_seconds(species: SpeciesStats, settings: RateSettings) -> float:
    """Incubation or gestation time, depending on the species."""
    _check_positive("hatch_speed", settings.hatch_speed)
    if species.birth_type is BirthType.INCUBATION:
        _check_positive(f"{species.name}.egg_speed", species.egg_speed)
        _check_positive(f"{species.name}.egg_speed_multiplier", species.egg_speed_multiplier)
        seconds = INCUBATION_SCALE / (
            species.egg_speed * species.egg_speed_multiplier * settings.hatch_speed
        )
    else:
        _check_positive(f"{species.name}.gestation_speed", species.gestation_speed)
        _check_positive(
            f"{species.name}.gestation_speed_multiplier", species.gestation_speed_multiplier
        )
        seconds = 1.0 / (
            species.gestation_speed * species.gestation_speed_multiplier * settings.hatch_speed
        )
    if settings.gen2_hatch_effect:
        seconds /= GEN2_HATCH_DIVISOR
    return seconds


# =============================================================================
# APPETITE
# =============================================================================


def food_rates(species: SpeciesStats, settings: RateSettings) -> FoodRates:
    """Build the appetite curve for a species."""
    _check_positive(f"{species.name}.base_food_rate", species.base_food_rate)
    _check_positive(f"{species.name}.baby_food_rate", species.baby_food_rate)
    _check_positive(f"{species.name}.extra_baby_food_rate", species.extra_baby_food_rate)
    _check_positive("consumption_speed", settings.consumption_speed)

    maturation_seconds = total_maturation_seconds(species, settings)
    max_rate = (
        species.base_food_rate
        * species.baby_food_rate
        * species.extra_baby_food_rate
        * settings.consumption_speed
    )
    min_rate = species.base_food_rate * settings.consumption_speed
    # Species whose babies eat less than adults grow a flat curve.
    max_rate = max(max_rate, min_rate)
    decay = (max_rate - min_rate) / maturation_seconds
    return FoodRates(max_rate, min_rate, decay, maturation_seconds)


def _nursing(settings: RateSettings) -> float:
    _check_positive("nursing_multiplier", settings.nursing_multiplier)
    return settings.nursing_multiplier


def consumption_rate_per_second(
    species: SpeciesStats, settings: RateSettings, maturation: float = 0.0
) -> float:
    """Instantaneous consumption in points/second at a maturation fraction."""
    rates = food_rates(species, settings)
    clock_seconds = clamp(maturation) * rates.maturation_seconds
    return rates.rate_at(clock_seconds) / _nursing(settings)


def consumption_rate_per_minute(
    species: SpeciesStats, settings: RateSettings, maturation: float = 0.0
) -> float:
    """Instantaneous consumption in points/minute at a maturation fraction."""
    return consumption_rate_per_second(species, settings, maturation) * 60.0


def food_for_period(
    start: float, end: float, species: SpeciesStats, settings: RateSettings
) -> float:
    """Points eaten between two maturation-clock readings.

    The window is clamped to the maturation period, matching the breeding
    breakdowns which stop counting at adulthood.
    """
    rates = food_rates(species, settings)
    start = clamp(start, 0.0, rates.maturation_seconds)
    end = clamp(end, start, rates.maturation_seconds)
    raw = linear_integral(rates.rate_at(start), -rates.decay, end - start)
    return raw / _nursing(settings)


def seconds_to_consume(
    points: float, species: SpeciesStats, settings: RateSettings, maturation: float = 0.0
) -> float:
    """How long ``points`` last for one creature starting at ``maturation``.

    Integrates the falling juvenile rate exactly, then continues at the
    adult rate once the creature is grown.
    """
    if points <= 0:
        return 0.0
    rates = food_rates(species, settings)
    nursing = _nursing(settings)
    clock_seconds = clamp(maturation) * rates.maturation_seconds

    growing_seconds = max(0.0, rates.maturation_seconds - clock_seconds)
    rate = rates.rate_at(clock_seconds) / nursing
    slope = -rates.decay / nursing
    growing_points = linear_integral(rate, slope, growing_seconds)
    if points <= growing_points:
        return min(growing_seconds, linear_depletion_time(points, rate, slope))

    adult_rate = rates.min_rate / nursing
    return growing_seconds + (points - growing_points) / adult_rate


# =============================================================================
# INVENTORY
# =============================================================================


def carry_weight(species_weight: float, maturation: float) -> float:
    """Carry weight scales with maturation."""
    return max(0.0, species_weight) * clamp(maturation)


def food_capacity(carry_weight: float, food: FoodStats, species: SpeciesStats) -> int:
    """Whole food items that fit into ``carry_weight``."""
    effective_weight = food.weight * species.food_weight_multiplier(food.name)
    if not effective_weight > 0:
        raise InvalidInput(f"Effective weight of {food.name} must be positive, got {effective_weight!r}")
    if carry_weight <= 0:
        return 0
    # Guard the floor against 3.0000000004-style rounding.
    return int(math.floor(carry_weight / effective_weight + 1e-9))


def buffer_seconds(
    item_count: float,
    food: FoodStats,
    species: SpeciesStats,
    maturation: float,
    settings: RateSettings,
) -> float:
    """Seconds ``item_count`` items keep one creature fed.

    Ignores spoilage; see ``nursery.trough`` for stack decay. The appetite
    is integrated over the maturation curve, so long buffers benefit from
    the creature eating less as it grows.
    """
    _check_positive(f"{food.name}.food_value", food.food_value)
    if item_count <= 0:
        return 0.0
    return max(0.0, seconds_to_consume(item_count * food.food_value, species, settings, maturation))


# =============================================================================
# BREAKDOWNS
# =============================================================================


def daily_food(
    species: SpeciesStats,
    food: FoodStats,
    settings: RateSettings,
    band_seconds: float = SECONDS_PER_DAY,
) -> Dict[int, int]:
    """Items of ``food`` needed per band (day 1, day 2, ...) until adulthood.

    Each band integrates its own slice of the appetite curve; the loss
    factor pads every band for feeding losses.
    """
    _check_positive("band_seconds", band_seconds)
    _check_positive(f"{food.name}.food_value", food.food_value)
    total = total_maturation_seconds(species, settings)
    padding = 1.0 + settings.loss_factor / 100.0

    bands: Dict[int, int] = {}
    band = 1
    start = 0.0
    while start < total - TIME_EPSILON:
        end = min(band * band_seconds, total)
        points = food_for_period(start, end, species, settings)
        if points > POINT_EPSILON:
            bands[band] = int(math.ceil(points * padding / food.food_value))
        start = end
        band += 1
        if band > MAX_FOOD_BANDS:
            logger.debug(
                "Food breakdown for %s truncated at %d bands", species.name, MAX_FOOD_BANDS
            )
            break
    return bands


def hand_feed_threshold(
    species: SpeciesStats,
    food: FoodStats,
    creature_weight: float,
    settings: RateSettings,
    steps: int = HAND_FEED_SEARCH_STEPS,
) -> HandFeedThreshold:
    """Earliest maturation at which a full inventory lasts until juvenile.

    Before this point the baby cannot carry enough food to bridge the gap
    and has to be hand fed.
    """
    maturation_seconds = total_maturation_seconds(species, settings)
    juvenile_at = maturation_seconds * BABY_FRACTION

    low, high = 0.0, BABY_FRACTION
    threshold = BABY_FRACTION
    for _ in range(steps):
        mid = (low + high) / 2.0
        time_to_juvenile = juvenile_at - maturation_seconds * mid
        capacity = food_capacity(carry_weight(creature_weight, mid), food, species)
        if buffer_seconds(capacity, food, species, mid, settings) >= time_to_juvenile:
            threshold = mid
            high = mid
        else:
            low = mid

    return HandFeedThreshold(fraction=threshold, seconds=maturation_seconds * threshold)
