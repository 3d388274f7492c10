"""Pydantic models for data crossing the core's boundary.

Catalog files, feed payloads and persisted session records arrive as plain
dicts from collaborators outside the core. They are validated here once and
converted into the frozen dataclasses the core computes with.
"""

from typing import Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Epoch values above this are millisecond timestamps (the browser clients
# and the rates poller report ``Date.now()``).
_MILLISECOND_THRESHOLD = 1e11


def _to_epoch_seconds(value: float) -> float:
    value = float(value)
    return value / 1000.0 if value > _MILLISECOND_THRESHOLD else value


class SpeciesRecord(BaseModel):
    """A creature entry in the catalog file (``creatures`` section)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    weight: float = Field(default=100.0, ge=0)
    age_speed: float = Field(alias="agespeed", gt=0)
    age_speed_multiplier: float = Field(default=1.0, alias="agespeedmult", gt=0)
    diet: str = Field(default="Carnivore", alias="type")
    base_food_rate: float = Field(default=0.001302, alias="basefoodrate", gt=0)
    baby_food_rate: float = Field(default=1.0, alias="babyfoodrate", gt=0)
    extra_baby_food_rate: float = Field(default=1.0, alias="extrababyfoodrate", gt=0)
    food_weight_multipliers: Dict[str, float] = Field(
        default_factory=dict, alias="foodweightmultipliers"
    )
    birth_type: str = Field(default="Incubation", alias="birthtype")
    egg_speed: Optional[float] = Field(default=None, alias="eggspeed")
    egg_speed_multiplier: float = Field(default=1.0, alias="eggspeedmult")
    gestation_speed: Optional[float] = Field(default=None, alias="gestationspeed")
    gestation_speed_multiplier: float = Field(default=1.0, alias="gestationspeedmult")


class FoodRecord(BaseModel):
    """A food entry in the catalog file (``foods`` section)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    weight: float = Field(default=0.1, ge=0)
    food_value: float = Field(alias="food", gt=0)
    stack_size: int = Field(alias="stack", gt=0)
    spoil_seconds: float = Field(alias="spoil", gt=0)


class RateChangePayload(BaseModel):
    """Rate feed payload.

    Accepts both the feed's own keys and the rates poller's cache format
    (``maturation``, ``hatch``, ``consumption``, ``lastChangedAt``).
    """

    model_config = ConfigDict(extra="ignore")

    effective_at: float = Field(validation_alias=AliasChoices("effectiveAt", "lastChangedAt"))
    maturation_multiplier: float = Field(
        default=1.0, gt=0, validation_alias=AliasChoices("maturationMultiplier", "maturation")
    )
    hatch_multiplier: float = Field(
        default=1.0, gt=0, validation_alias=AliasChoices("hatchMultiplier", "hatch")
    )
    consumption_multiplier: float = Field(
        default=1.0, gt=0, validation_alias=AliasChoices("consumptionMultiplier", "consumption")
    )

    @field_validator("effective_at")
    @classmethod
    def _seconds(cls, value: float) -> float:
        return _to_epoch_seconds(value)


class ServerStatusPayload(BaseModel):
    """Server status feed payload: ``{"status": "online"|"offline", "since": ts}``."""

    model_config = ConfigDict(extra="ignore")

    status: str
    since: float = Field(validation_alias=AliasChoices("since", "timestamp"))

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("online", "offline"):
            raise ValueError(f"unknown server status {value!r}")
        return value

    @field_validator("since")
    @classmethod
    def _seconds(cls, value: float) -> float:
        return _to_epoch_seconds(value)


class SessionRecord(BaseModel):
    """Flat persisted form of a ``SessionClock``.

    Unknown keys are caller-owned extras and survive a round trip verbatim.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Union[str, int]
    species: str = Field(validation_alias=AliasChoices("species", "creature"))
    maturation_at_checkpoint: float = Field(
        default=0.0, ge=0.0, le=1.0, alias="maturationAtCheckpoint"
    )
    checkpoint_time: float = Field(alias="checkpointTime")
    total_maturation_seconds: float = Field(default=0.0, ge=0.0, alias="totalMaturationSeconds")
    is_playing: bool = Field(default=False, alias="isPlaying")
    offline_seconds: float = Field(default=0.0, ge=0.0, alias="offlineSeconds")
