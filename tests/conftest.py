"""Pytest configuration and fixtures for nursery tests."""

import pytest

from nursery.catalog import Catalog
from nursery.clock import ManualClock
from nursery.stats import BirthType, DietType, FoodStats, RateSettings, SpeciesStats

T0 = 1_700_000_000.0


@pytest.fixture
def manual_clock():
    """A clock frozen at a fixed epoch until advanced."""
    return ManualClock(start=T0)


@pytest.fixture
def settings():
    return RateSettings()


@pytest.fixture
def rex():
    """Grows up in 4000s; newborns eat 0.03 pts/s, adults 0.01 pts/s."""
    return SpeciesStats(
        name="Rex",
        weight=500.0,
        age_speed=0.00025,
        diet_type=DietType.CARNIVORE,
        base_food_rate=0.01,
        baby_food_rate=2.0,
        extra_baby_food_rate=1.5,
        birth_type=BirthType.INCUBATION,
        egg_speed=0.01,
    )


@pytest.fixture
def grazer():
    """Flat appetite of 10 points per minute at every maturation."""
    return SpeciesStats(
        name="Grazer",
        weight=200.0,
        age_speed=0.00025,
        diet_type=DietType.HERBIVORE,
        base_food_rate=10.0 / 60.0,
        birth_type=BirthType.GESTATION,
        gestation_speed=0.0001,
    )


@pytest.fixture
def raw_meat():
    """600 points per stack, spoils after 30 minutes."""
    return FoodStats(name="Raw Meat", weight=0.1, food_value=50.0, stack_size=12, spoil_seconds=1800.0)


@pytest.fixture
def jerky():
    return FoodStats(name="Jerky", weight=0.1, food_value=50.0, stack_size=12, spoil_seconds=36000.0)


@pytest.fixture
def catalog_data():
    """A decoded catalog document in the on-disk key format."""
    return {
        "creatures": {
            "Rex": {
                "weight": 500,
                "agespeed": 0.00025,
                "type": "Carnivore",
                "basefoodrate": 0.01,
                "babyfoodrate": 2,
                "extrababyfoodrate": 1.5,
                "birthtype": "Incubation",
                "eggspeed": 0.01,
            },
            "Parasaur": {
                "weight": 200,
                "agespeed": 0.0005,
                "type": "Herbivore",
                "basefoodrate": 0.005,
                "birthtype": "incubation",
                "eggspeed": 0.02,
                "foodweightmultipliers": {"Mejoberry": 0.5},
            },
            "Dodo": {
                "weight": 50,
                "agespeed": 0.001,
                "type": "Omnivore",
                "birthtype": "Incubation",
            },
        },
        "foods": {
            "Raw Meat": {"food": 50, "stack": 12, "spoil": 1800, "weight": 0.1},
            "Cooked Meat": {"food": 70, "stack": 12, "spoil": 7200, "weight": 0.1},
            "Mejoberry": {"food": 20, "stack": 100, "spoil": 600, "weight": 0.1},
        },
        "foodLists": {
            "Carnivore": ["Raw Meat", "Cooked Meat"],
            "Herbivore": ["Mejoberry"],
        },
    }


@pytest.fixture
def catalog(catalog_data):
    return Catalog.from_mapping(catalog_data)
