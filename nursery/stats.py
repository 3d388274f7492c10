"""Immutable input records for the nursery core.

Species and food stats are loaded once by ``nursery.catalog`` and shared by
reference. Rate settings describe the server the creatures live on. The
trough records (entries, stacks, container config) are built fresh for every
simulation run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional

from nursery.config.rates import (
    DEFAULT_CONSUMPTION_SPEED,
    DEFAULT_HATCH_SPEED,
    DEFAULT_LOSS_FACTOR,
    DEFAULT_MATURATION_SPEED,
    DEFAULT_NURSING_MULTIPLIER,
)
from nursery.config.troughs import TROUGH_TYPES
from nursery.exceptions import InvalidInput


class DietType(Enum):
    HERBIVORE = "Herbivore"
    CARNIVORE = "Carnivore"
    OMNIVORE = "Omnivore"
    PISCIVORE = "Piscivore"
    MINERAL = "Mineral"
    SANGUIVORE = "Sanguivore"

    @classmethod
    def parse(cls, value: str) -> "DietType":
        """Case-insensitive lookup by display name."""
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise InvalidInput(f"Unknown diet type: {value!r}")


class BirthType(Enum):
    INCUBATION = "Incubation"
    GESTATION = "Gestation"


def _require_positive(name: str, value: float) -> None:
    if not value > 0 or math.isinf(value):
        raise InvalidInput(f"{name} must be a positive finite number, got {value!r}")


@dataclass(frozen=True)
class SpeciesStats:
    """Per-species growth and appetite constants.

    Attributes:
        name: Species display name (catalog key).
        weight: Base carry weight of an adult.
        age_speed: Maturation progress per second at 1x rates.
        age_speed_multiplier: Species-specific scaling on ``age_speed``.
        diet_type: Broad diet category.
        base_food_rate: Adult food consumption in points per second.
        baby_food_rate: Newborn appetite multiplier.
        extra_baby_food_rate: Second newborn appetite multiplier.
        food_weight_multipliers: Per-food inventory weight multipliers.
    """

    name: str
    weight: float
    age_speed: float
    age_speed_multiplier: float = 1.0
    diet_type: DietType = DietType.CARNIVORE
    base_food_rate: float = 0.001302
    baby_food_rate: float = 1.0
    extra_baby_food_rate: float = 1.0
    food_weight_multipliers: Mapping[str, float] = field(default_factory=dict, hash=False)
    birth_type: BirthType = BirthType.INCUBATION
    egg_speed: Optional[float] = None
    egg_speed_multiplier: float = 1.0
    gestation_speed: Optional[float] = None
    gestation_speed_multiplier: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "food_weight_multipliers", MappingProxyType(dict(self.food_weight_multipliers))
        )

    def food_weight_multiplier(self, food_name: str) -> float:
        return self.food_weight_multipliers.get(food_name, 1.0)


@dataclass(frozen=True)
class FoodStats:
    """Inventory and nutrition stats for one food item."""

    name: str
    weight: float
    food_value: float
    stack_size: int
    spoil_seconds: float

    @property
    def points_per_stack(self) -> float:
        return self.food_value * self.stack_size

    def validate(self) -> None:
        """Raise InvalidInput unless every constant is usable in a division."""
        _require_positive(f"{self.name}.food_value", self.food_value)
        _require_positive(f"{self.name}.stack_size", self.stack_size)
        _require_positive(f"{self.name}.spoil_seconds", self.spoil_seconds)


@dataclass(frozen=True)
class RateSettings:
    """Server-wide multipliers and feature flags.

    Attributes:
        maturation_speed: Baby mature speed multiplier.
        hatch_speed: Egg hatch / gestation speed multiplier.
        consumption_speed: Food consumption multiplier.
        gen2_growth_effect: Halves maturation time when set.
        gen2_hatch_effect: Divides birth time by 1.5 when set.
        nursing_multiplier: Caretaker effectiveness; divides the consumption rate.
        stasis_mode: Creatures stop eating while nobody renders them, food
            keeps spoiling.
        loss_factor: Percent extra food budgeted in the daily breakdown.
    """

    maturation_speed: float = DEFAULT_MATURATION_SPEED
    hatch_speed: float = DEFAULT_HATCH_SPEED
    consumption_speed: float = DEFAULT_CONSUMPTION_SPEED
    gen2_growth_effect: bool = False
    gen2_hatch_effect: bool = False
    nursing_multiplier: float = DEFAULT_NURSING_MULTIPLIER
    stasis_mode: bool = False
    loss_factor: float = DEFAULT_LOSS_FACTOR

    def validate(self) -> None:
        _require_positive("maturation_speed", self.maturation_speed)
        _require_positive("hatch_speed", self.hatch_speed)
        _require_positive("consumption_speed", self.consumption_speed)
        _require_positive("nursing_multiplier", self.nursing_multiplier)
        if self.loss_factor < 0:
            raise InvalidInput(f"loss_factor cannot be negative, got {self.loss_factor}")

    def with_rates(
        self,
        *,
        maturation_speed: Optional[float] = None,
        hatch_speed: Optional[float] = None,
        consumption_speed: Optional[float] = None,
    ) -> "RateSettings":
        """Return a copy with the given multipliers replaced."""
        updated = replace(
            self,
            maturation_speed=self.maturation_speed if maturation_speed is None else maturation_speed,
            hatch_speed=self.hatch_speed if hatch_speed is None else hatch_speed,
            consumption_speed=self.consumption_speed if consumption_speed is None else consumption_speed,
        )
        updated.validate()
        return updated

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RateSettings":
        """Build settings from a camelCase settings dict (the dashboard's format).

        Unknown keys are ignored; missing keys keep their defaults.
        """
        keys = {
            "maturationSpeed": "maturation_speed",
            "hatchSpeed": "hatch_speed",
            "consumptionSpeed": "consumption_speed",
            "gen2GrowthEffect": "gen2_growth_effect",
            "gen2HatchEffect": "gen2_hatch_effect",
            "nursingMultiplier": "nursing_multiplier",
            "useStasisMode": "stasis_mode",
            "lossFactor": "loss_factor",
        }
        kwargs = {attr: data[key] for key, attr in keys.items() if data.get(key) is not None}
        settings = cls(**kwargs)
        settings.validate()
        return settings


@dataclass(frozen=True)
class TroughEntry:
    """A group of identical creatures feeding from the same trough.

    Attributes:
        species: Resolved species stats.
        quantity: Number of identical individuals (>= 1).
        maturation: Maturation fraction of every individual at time zero.
        max_food_override: Raised stomach capacity; adds growth-fill
            consumption while the creature is still growing.
        diet: Food names this group will eat (``None`` means anything).
    """

    species: SpeciesStats
    quantity: int = 1
    maturation: float = 0.0
    max_food_override: Optional[float] = None
    diet: Optional[FrozenSet[str]] = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise InvalidInput(f"quantity must be >= 1, got {self.quantity}")
        if not 0.0 <= self.maturation <= 1.0:
            raise InvalidInput(f"maturation must be within [0, 1], got {self.maturation}")
        if self.max_food_override is not None and self.max_food_override < 0:
            raise InvalidInput(f"max_food_override cannot be negative, got {self.max_food_override}")
        if self.diet is not None:
            object.__setattr__(self, "diet", frozenset(self.diet))

    def eats(self, food_name: str) -> bool:
        return self.diet is None or food_name in self.diet


@dataclass(frozen=True)
class FoodStack:
    """``stack_count`` stacks of one food; fractions are partial stacks."""

    food: FoodStats
    stack_count: float

    def __post_init__(self) -> None:
        if self.stack_count < 0:
            raise InvalidInput(f"stack_count cannot be negative, got {self.stack_count}")


@dataclass(frozen=True)
class TroughConfig:
    """Container spoilage modifier plus either a slot or a weight limit."""

    spoil_multiplier: float = 1.0
    slot_count: Optional[int] = None
    weight_capacity: Optional[float] = None

    def __post_init__(self) -> None:
        _require_positive("spoil_multiplier", self.spoil_multiplier)
        if self.slot_count is not None and self.weight_capacity is not None:
            raise InvalidInput("A trough is limited by slots or by weight, not both")
        if self.slot_count is not None and self.slot_count < 0:
            raise InvalidInput(f"slot_count cannot be negative, got {self.slot_count}")
        if self.weight_capacity is not None and self.weight_capacity < 0:
            raise InvalidInput(f"weight_capacity cannot be negative, got {self.weight_capacity}")

    def effective_spoil_seconds(self, food: FoodStats) -> float:
        return food.spoil_seconds * self.spoil_multiplier

    def stack_ceiling(self, food: FoodStats) -> Optional[int]:
        """Whole stacks of ``food`` that fit, or ``None`` when unlimited."""
        if self.slot_count is not None:
            return self.slot_count
        if self.weight_capacity is not None:
            stack_weight = food.weight * food.stack_size
            if stack_weight <= 0:
                return None
            return int(math.floor(self.weight_capacity / stack_weight))
        return None

    @classmethod
    def preset(cls, name: str, weight_capacity: Optional[float] = None) -> "TroughConfig":
        """Build one of the ``TROUGH_TYPES`` presets.

        Weight-limited presets need ``weight_capacity``.
        """
        try:
            preset_values = TROUGH_TYPES[name]
        except KeyError:
            raise InvalidInput(f"Unknown trough type: {name!r}") from None
        if preset_values["slots"] is None:
            if weight_capacity is None:
                raise InvalidInput(f"{name} is weight limited; weight_capacity is required")
            return cls(spoil_multiplier=preset_values["spoil_multiplier"], weight_capacity=weight_capacity)
        return cls(spoil_multiplier=preset_values["spoil_multiplier"], slot_count=preset_values["slots"])
