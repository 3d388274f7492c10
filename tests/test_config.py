"""Tests for configuration, settings and the ambient helpers."""

import logging

import pytest

from nursery.clock import Clock, ManualClock, SystemClock
from nursery.config import NurseryConfig
from nursery.config.simulation import SECONDS_PER_DAY, SIMULATION_HORIZON_SECONDS
from nursery.exceptions import ConfigurationError, InvalidInput
from nursery.logging_config import configure_logging
from nursery.result import Err, Ok
from nursery.stats import RateSettings


class TestNurseryConfig:
    def test_defaults(self):
        config = NurseryConfig()

        assert config.horizon_seconds == SIMULATION_HORIZON_SECONDS
        assert config.band_seconds == SECONDS_PER_DAY
        assert config.catalog_path is None

    def test_from_env(self):
        config = NurseryConfig.from_env(
            {
                "NURSERY_HORIZON_SECONDS": "3600",
                "NURSERY_BAND_SECONDS": "600",
                "NURSERY_HAND_FEED_STEPS": "20",
                "NURSERY_CATALOG_PATH": "/data/catalog.json",
            }
        )

        assert config.horizon_seconds == 3600.0
        assert config.band_seconds == 600.0
        assert config.hand_feed_steps == 20
        assert config.catalog_path == "/data/catalog.json"

    def test_from_env_uses_defaults(self):
        assert NurseryConfig.from_env({}) == NurseryConfig()

    def test_from_env_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            NurseryConfig.from_env({"NURSERY_HAND_FEED_STEPS": "lots"})

    def test_rejects_non_positive_values(self):
        with pytest.raises(ConfigurationError):
            NurseryConfig(horizon_seconds=0)
        with pytest.raises(ConfigurationError):
            NurseryConfig(hand_feed_steps=0)


class TestRateSettings:
    def test_from_mapping(self):
        settings = RateSettings.from_mapping(
            {"maturationSpeed": 5, "useStasisMode": True, "lossFactor": 10, "unknown": "ignored"}
        )

        assert settings.maturation_speed == 5
        assert settings.stasis_mode is True
        assert settings.loss_factor == 10
        assert settings.hatch_speed == 1.0

    def test_from_mapping_validates(self):
        with pytest.raises(InvalidInput):
            RateSettings.from_mapping({"consumptionSpeed": 0})

    def test_with_rates_keeps_other_fields(self):
        settings = RateSettings(gen2_growth_effect=True).with_rates(maturation_speed=3.0)

        assert settings.maturation_speed == 3.0
        assert settings.gen2_growth_effect

    def test_with_rates_validates(self):
        with pytest.raises(InvalidInput):
            RateSettings().with_rates(hatch_speed=-1.0)


class TestClock:
    def test_manual_clock(self):
        clock = ManualClock(start=100.0)

        assert clock.advance(50) == 150.0
        clock.set(10.0)
        assert clock.now() == 10.0

    def test_manual_clock_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)

    def test_clocks_satisfy_protocol(self):
        assert isinstance(ManualClock(), Clock)
        assert isinstance(SystemClock(), Clock)
        assert SystemClock().now() > 1_600_000_000


class TestResult:
    def test_ok(self):
        result = Ok(0.5)

        assert result.is_ok()
        assert result.map(lambda pct: pct * 100).unwrap() == 50.0
        assert result.error is None

    def test_err(self):
        result = Err("bad record")

        assert result.is_err()
        assert result.unwrap_or(0.0) == 0.0
        assert result.map_err(lambda e: f"session 7: {e}").error == "session 7: bad record"
        with pytest.raises(ValueError):
            result.unwrap()


def test_configure_logging_reads_env(monkeypatch):
    monkeypatch.setenv("NURSERY_LOG_LEVEL", "debug")
    logger = configure_logging()

    assert logger.name == "nursery"
    assert logger.level == logging.DEBUG


def test_configure_logging_explicit_level():
    logger = configure_logging(level="warning", verbose_modules=["trough"])

    assert logger.level == logging.WARNING
    assert logging.getLogger("nursery.trough").level == logging.DEBUG
    assert logging.getLogger("nursery.tracker").getEffectiveLevel() == logging.WARNING


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ConfigurationError):
        configure_logging(level="chatty")
