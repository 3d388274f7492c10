"""Lightweight runtime configuration helpers."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from nursery.config.simulation import (
    HAND_FEED_SEARCH_STEPS,
    SECONDS_PER_DAY,
    SIMULATION_HORIZON_SECONDS,
)
from nursery.exceptions import ConfigurationError

ENV_PREFIX = "NURSERY_"


@dataclass(frozen=True)
class NurseryConfig:
    """Tunables shared by the simulator and the planners.

    Attributes:
        horizon_seconds: Trough simulator safety horizon.
        band_seconds: Width of one band in the food breakdown.
        hand_feed_steps: Bisection steps for the hand-feed threshold.
        catalog_path: Catalog JSON location read by ``Catalog.from_config``.
    """

    horizon_seconds: float = SIMULATION_HORIZON_SECONDS
    band_seconds: float = SECONDS_PER_DAY
    hand_feed_steps: int = HAND_FEED_SEARCH_STEPS
    catalog_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.horizon_seconds <= 0:
            raise ConfigurationError(f"horizon_seconds must be positive, got {self.horizon_seconds}")
        if self.band_seconds <= 0:
            raise ConfigurationError(f"band_seconds must be positive, got {self.band_seconds}")
        if self.hand_feed_steps < 1:
            raise ConfigurationError(f"hand_feed_steps must be >= 1, got {self.hand_feed_steps}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NurseryConfig":
        """Build a config from ``NURSERY_*`` environment variables.

        Recognised: ``NURSERY_HORIZON_SECONDS``, ``NURSERY_BAND_SECONDS``,
        ``NURSERY_HAND_FEED_STEPS`` and ``NURSERY_CATALOG_PATH``.
        """
        env = os.environ if environ is None else environ
        try:
            return cls(
                horizon_seconds=float(env.get(f"{ENV_PREFIX}HORIZON_SECONDS", SIMULATION_HORIZON_SECONDS)),
                band_seconds=float(env.get(f"{ENV_PREFIX}BAND_SECONDS", SECONDS_PER_DAY)),
                hand_feed_steps=int(env.get(f"{ENV_PREFIX}HAND_FEED_STEPS", HAND_FEED_SEARCH_STEPS)),
                catalog_path=env.get(f"{ENV_PREFIX}CATALOG_PATH") or None,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid nursery environment setting: {exc}") from exc
