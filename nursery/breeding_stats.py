"""One-shot breeding summary for a single creature.

Bundles the maturation model's answers into the record the dashboard and
chat commands render: timers, food totals, inventory buffer and the hand
feeding threshold.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from nursery import maturation
from nursery.config import NurseryConfig
from nursery.exceptions import InvalidInput
from nursery.maturation import GrowthStage
from nursery.stats import FoodStats, RateSettings, SpeciesStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreedingStats:
    """Everything a breeder wants to know about one baby.

    Times are seconds, rates are points per minute, food amounts are items
    of the chosen food.
    """

    birth_type: str
    birth_seconds: Optional[float]
    maturation_seconds: float
    baby_seconds: float
    maturation_elapsed: float
    maturation_remaining: float
    baby_remaining: float
    growth_stage: GrowthStage
    total_food_items: int
    to_juvenile_food_items: int
    to_adult_food_items: int
    food_capacity: int
    current_buffer: float
    current_rate_per_minute: float
    hand_feed_until: float
    hand_feed_seconds: float
    daily_food: Dict[int, int]


def _items(points: float, food: FoodStats) -> int:
    return int(math.ceil(points / food.food_value))


def _birth_seconds(species: SpeciesStats, settings: RateSettings) -> Optional[float]:
    # Catalog entries for untameable or wild-only species carry no birth data.
    try:
        return maturation.birth_seconds(species, settings)
    except InvalidInput as exc:
        logger.debug("No birth time for %s: %s", species.name, exc)
        return None


def breeding_stats(
    species: SpeciesStats,
    food: FoodStats,
    weight: float,
    maturation_fraction: float,
    settings: RateSettings,
    config: Optional[NurseryConfig] = None,
) -> BreedingStats:
    """Compute the full breeding summary.

    Args:
        species: Creature being raised.
        food: Food it is fed.
        weight: The creature's weight stat; non-positive values fall back to
            the species default so half-typed input still renders.
        maturation_fraction: Current maturation; values outside [0, 1] are
            treated as a newborn.
        settings: Server rates.
        config: Band width and bisection steps; defaults when omitted.
    """
    config = config or NurseryConfig()
    safe_weight = weight if weight and weight > 0 else species.weight
    if 0.0 <= maturation_fraction <= 1.0:
        progress = maturation_fraction
    else:
        logger.debug("Ignoring out-of-range maturation %r for %s", maturation_fraction, species.name)
        progress = 0.0

    total = maturation.total_maturation_seconds(species, settings)
    baby = maturation.baby_seconds(species, settings)
    elapsed = total * progress

    capacity = maturation.food_capacity(maturation.carry_weight(safe_weight, progress), food, species)
    threshold = maturation.hand_feed_threshold(
        species, food, safe_weight, settings, steps=config.hand_feed_steps
    )

    return BreedingStats(
        birth_type=species.birth_type.value,
        birth_seconds=_birth_seconds(species, settings),
        maturation_seconds=total,
        baby_seconds=baby,
        maturation_elapsed=elapsed,
        maturation_remaining=total - elapsed,
        baby_remaining=max(0.0, baby - elapsed),
        growth_stage=maturation.growth_stage(progress),
        total_food_items=_items(maturation.food_for_period(0.0, total, species, settings), food),
        to_juvenile_food_items=_items(
            maturation.food_for_period(elapsed, baby, species, settings), food
        ),
        to_adult_food_items=_items(
            maturation.food_for_period(elapsed, total, species, settings), food
        ),
        food_capacity=capacity,
        current_buffer=maturation.buffer_seconds(capacity, food, species, progress, settings),
        current_rate_per_minute=maturation.consumption_rate_per_minute(species, settings, progress),
        hand_feed_until=threshold.percent,
        hand_feed_seconds=threshold.seconds,
        daily_food=maturation.daily_food(species, food, settings, band_seconds=config.band_seconds),
    )
