"""Tests for catalog loading and lookups."""

import orjson
import pytest

from nursery.catalog import Catalog
from nursery.config import NurseryConfig
from nursery.exceptions import ConfigurationError, NurseryError, Unresolvable
from nursery.stats import BirthType, DietType


class TestLoading:
    def test_species_fields(self, catalog):
        rex = catalog.species("Rex")

        assert rex.age_speed == pytest.approx(0.00025)
        assert rex.base_food_rate == pytest.approx(0.01)
        assert rex.baby_food_rate == 2
        assert rex.diet_type is DietType.CARNIVORE
        assert rex.birth_type is BirthType.INCUBATION
        assert rex.egg_speed == pytest.approx(0.01)

    def test_defaults_for_missing_fields(self, catalog):
        dodo = catalog.species("Dodo")

        assert dodo.base_food_rate == pytest.approx(0.001302)
        assert dodo.egg_speed is None
        assert dodo.food_weight_multipliers == {}

    def test_food_weight_multipliers(self, catalog):
        assert catalog.species("Parasaur").food_weight_multiplier("Mejoberry") == 0.5
        assert catalog.species("Parasaur").food_weight_multiplier("Raw Meat") == 1.0

    def test_food_fields(self, catalog):
        meat = catalog.food("Raw Meat")

        assert meat.food_value == 50
        assert meat.stack_size == 12
        assert meat.spoil_seconds == 1800
        assert meat.points_per_stack == 600

    def test_invalid_creature(self, catalog_data):
        catalog_data["creatures"]["Rex"]["agespeed"] = 0
        with pytest.raises(ConfigurationError):
            Catalog.from_mapping(catalog_data)

    def test_unknown_birth_type(self, catalog_data):
        catalog_data["creatures"]["Rex"]["birthtype"] = "Budding"
        with pytest.raises(ConfigurationError):
            Catalog.from_mapping(catalog_data)

    def test_invalid_food(self, catalog_data):
        catalog_data["foods"]["Raw Meat"]["stack"] = 0
        with pytest.raises(ConfigurationError):
            Catalog.from_mapping(catalog_data)

    def test_from_json(self, catalog_data, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_bytes(orjson.dumps(catalog_data))

        catalog = Catalog.from_json(path)
        assert "Rex" in catalog
        assert catalog.food("Mejoberry").stack_size == 100

    def test_from_json_rejects_garbage(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_bytes(b"{not json")

        with pytest.raises(ConfigurationError):
            Catalog.from_json(path)

    def test_from_json_rejects_non_object(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_bytes(b"[1, 2, 3]")

        with pytest.raises(ConfigurationError):
            Catalog.from_json(path)

    def test_from_json_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Catalog.from_json(tmp_path / "missing.json")

    def test_from_config(self, catalog_data, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_bytes(orjson.dumps(catalog_data))

        catalog = Catalog.from_config(NurseryConfig(catalog_path=str(path)))
        assert "Parasaur" in catalog

    def test_from_config_requires_path(self):
        with pytest.raises(ConfigurationError):
            Catalog.from_config(NurseryConfig())


class TestLookups:
    def test_unknown_names_are_unresolvable(self, catalog):
        with pytest.raises(Unresolvable):
            catalog.species("Dragon")
        with pytest.raises(KeyError):
            catalog.food("Ambrosia")

    def test_unresolvable_is_a_nursery_error(self, catalog):
        with pytest.raises(NurseryError) as excinfo:
            catalog.food("Ambrosia")
        assert str(excinfo.value) == "Unknown food: 'Ambrosia'"

    def test_diet_for(self, catalog):
        assert catalog.diet_for("Rex") == {"Raw Meat", "Cooked Meat"}
        assert catalog.diet_for("Parasaur") == {"Mejoberry"}

    def test_missing_diet_list_falls_back_to_carnivore(self, catalog):
        assert catalog.diet_for("Dodo") == {"Raw Meat", "Cooked Meat"}

    def test_no_diet_lists_means_anything_goes(self, catalog_data):
        del catalog_data["foodLists"]
        catalog = Catalog.from_mapping(catalog_data)

        assert catalog.diet_for("Rex") is None
        assert catalog.trough_entry("Rex").eats("Mejoberry")

    def test_default_food(self, catalog):
        assert catalog.default_food("Rex").name == "Raw Meat"
        assert catalog.default_food(catalog.species("Parasaur")).name == "Mejoberry"

    def test_trough_entry(self, catalog):
        entry = catalog.trough_entry("Parasaur", quantity=2, maturation=0.25)

        assert entry.species.name == "Parasaur"
        assert entry.quantity == 2
        assert entry.eats("Mejoberry")
        assert not entry.eats("Raw Meat")

    def test_food_stack(self, catalog):
        stack = catalog.food_stack("Cooked Meat", 2.5)

        assert stack.food.name == "Cooked Meat"
        assert stack.stack_count == 2.5
