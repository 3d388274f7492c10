"""Species and food catalog.

Loaded once at process start from a JSON document shaped like::

    {
        "creatures": {"Rex": {"agespeed": 0.000003, "basefoodrate": 0.001852, ...}},
        "foods": {"Raw Meat": {"food": 50, "spoil": 600, "stack": 40, "weight": 0.1}},
        "foodLists": {"Carnivore": ["Raw Meat", "Cooked Meat"]}
    }

and passed around by reference. Lookups of unknown names raise
``Unresolvable`` instead of quietly returning ``None``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

import orjson
from pydantic import ValidationError

from nursery.config import NurseryConfig
from nursery.exceptions import ConfigurationError, InvalidInput, Unresolvable
from nursery.models import FoodRecord, SpeciesRecord
from nursery.stats import (
    BirthType,
    DietType,
    FoodStack,
    FoodStats,
    SpeciesStats,
    TroughEntry,
)

logger = logging.getLogger(__name__)

FALLBACK_DIET = DietType.CARNIVORE.value


def _species_from_record(name: str, record: SpeciesRecord) -> SpeciesStats:
    try:
        birth_type = BirthType(record.birth_type.strip().capitalize())
    except ValueError:
        raise ConfigurationError(f"{name}: unknown birth type {record.birth_type!r}") from None
    try:
        diet_type = DietType.parse(record.diet)
    except InvalidInput as exc:
        raise ConfigurationError(f"{name}: {exc}") from exc
    return SpeciesStats(
        name=name,
        weight=record.weight,
        age_speed=record.age_speed,
        age_speed_multiplier=record.age_speed_multiplier,
        diet_type=diet_type,
        base_food_rate=record.base_food_rate,
        baby_food_rate=record.baby_food_rate,
        extra_baby_food_rate=record.extra_baby_food_rate,
        food_weight_multipliers=record.food_weight_multipliers,
        birth_type=birth_type,
        egg_speed=record.egg_speed,
        egg_speed_multiplier=record.egg_speed_multiplier,
        gestation_speed=record.gestation_speed,
        gestation_speed_multiplier=record.gestation_speed_multiplier,
    )


class Catalog:
    """Read-only species/food lookup with diet lists.

    Attributes:
        species_by_name: Species stats keyed by name.
        foods_by_name: Food stats keyed by name, in file order.
        food_lists: Edible food names keyed by diet display name, in
            preference order.
    """

    def __init__(
        self,
        species: Iterable[SpeciesStats],
        foods: Iterable[FoodStats],
        food_lists: Optional[Mapping[str, List[str]]] = None,
    ) -> None:
        self.species_by_name: Dict[str, SpeciesStats] = {s.name: s for s in species}
        self.foods_by_name: Dict[str, FoodStats] = {f.name: f for f in foods}
        self.food_lists: Dict[str, List[str]] = {
            diet: list(names) for diet, names in (food_lists or {}).items()
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Catalog":
        """Validate a decoded catalog document.

        Raises:
            ConfigurationError: If any record fails validation.
        """
        species: List[SpeciesStats] = []
        for name, raw in (data.get("creatures") or {}).items():
            try:
                record = SpeciesRecord.model_validate(raw)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid creature {name!r}: {exc}") from exc
            species.append(_species_from_record(name, record))

        foods: List[FoodStats] = []
        for name, raw in (data.get("foods") or {}).items():
            try:
                record = FoodRecord.model_validate(raw)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid food {name!r}: {exc}") from exc
            foods.append(
                FoodStats(
                    name=name,
                    weight=record.weight,
                    food_value=record.food_value,
                    stack_size=record.stack_size,
                    spoil_seconds=record.spoil_seconds,
                )
            )

        catalog = cls(species, foods, data.get("foodLists"))
        logger.info(
            "Catalog loaded: %d species, %d foods, %d diets",
            len(catalog.species_by_name),
            len(catalog.foods_by_name),
            len(catalog.food_lists),
        )
        return catalog

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Catalog":
        path = Path(path)
        try:
            data = orjson.loads(path.read_bytes())
        except OSError as exc:
            raise ConfigurationError(f"Cannot read catalog {path}: {exc}") from exc
        except orjson.JSONDecodeError as exc:
            raise ConfigurationError(f"Catalog {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Catalog {path} must contain a JSON object")
        return cls.from_mapping(data)

    @classmethod
    def from_config(cls, config: NurseryConfig) -> "Catalog":
        """Load the catalog named by ``config.catalog_path``."""
        if config.catalog_path is None:
            raise ConfigurationError("No catalog path configured (set NURSERY_CATALOG_PATH)")
        return cls.from_json(config.catalog_path)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def species(self, name: str) -> SpeciesStats:
        try:
            return self.species_by_name[name]
        except KeyError:
            raise Unresolvable(f"Unknown species: {name!r}") from None

    def food(self, name: str) -> FoodStats:
        try:
            return self.foods_by_name[name]
        except KeyError:
            raise Unresolvable(f"Unknown food: {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self.species_by_name

    def diet_for(self, species: Union[str, SpeciesStats]) -> Optional[FrozenSet[str]]:
        """Food names ``species`` eats, or ``None`` when no diet lists are loaded."""
        foods = self._diet_list(species)
        return frozenset(foods) if foods is not None else None

    def default_food(self, species: Union[str, SpeciesStats]) -> FoodStats:
        """The species' preferred food (first in its diet list)."""
        foods = self._diet_list(species)
        if not foods:
            raise Unresolvable(f"No diet list for {getattr(species, 'name', species)!r}")
        return self.food(foods[0])

    def _diet_list(self, species: Union[str, SpeciesStats]) -> Optional[List[str]]:
        stats = self.species(species) if isinstance(species, str) else species
        if not self.food_lists:
            return None
        foods = self.food_lists.get(stats.diet_type.value)
        if foods is None:
            logger.debug("No %s diet list; falling back to %s", stats.diet_type.value, FALLBACK_DIET)
            foods = self.food_lists.get(FALLBACK_DIET, [])
        return foods

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def trough_entry(
        self,
        species_name: str,
        quantity: int = 1,
        maturation: float = 0.0,
        max_food_override: Optional[float] = None,
    ) -> TroughEntry:
        species = self.species(species_name)
        return TroughEntry(
            species=species,
            quantity=quantity,
            maturation=maturation,
            max_food_override=max_food_override,
            diet=self.diet_for(species),
        )

    def food_stack(self, food_name: str, stack_count: float) -> FoodStack:
        return FoodStack(food=self.food(food_name), stack_count=stack_count)
