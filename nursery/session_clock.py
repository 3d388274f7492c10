"""Per-creature maturation clock.

A ``SessionClock`` stores the exact maturation at a checkpoint plus the time
of that checkpoint; the *current* maturation is always derived on demand.
Instances are immutable: every transition returns a new clock, so a
checkpoint can never drift out of step with its percentage.

State machine::

    PAUSED --start()--> PLAYING
    PLAYING --pause()--> PAUSED

Rate changes and server downtime are folded in through explicit calls:

- ``soft_reset`` re-bases the checkpoint at ``now`` (needed before the
  growth denominator changes);
- ``apply_retroactive_correction`` integrates time before and after a rate
  change that was only discovered later, then re-bases;
- ``add_offline_seconds`` removes server downtime from the elapsed time.

All timestamps are epoch seconds supplied by the caller (see
``nursery.clock``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError

from nursery.exceptions import InvalidInput, PersistenceError
from nursery.math_utils import clamp
from nursery.models import SessionRecord
from nursery.result import Err, Ok, Result

logger = logging.getLogger(__name__)

SessionId = Union[str, int]

# Keys owned by the clock itself; everything else in a record is an extra.
RECORD_KEYS = (
    "id",
    "species",
    "maturationAtCheckpoint",
    "checkpointTime",
    "totalMaturationSeconds",
    "isPlaying",
    "offlineSeconds",
)


@dataclass(frozen=True)
class SessionClock:
    """Maturation progress of one creature.

    Attributes:
        id: Caller-chosen identifier.
        species: Species name (catalog key).
        maturation_at_checkpoint: Exact maturation fraction at ``checkpoint_time``.
        checkpoint_time: Epoch seconds of the last checkpoint.
        total_maturation_seconds: Seconds from 0% to 100% at current rates.
        is_playing: Whether the creature is currently growing.
        offline_seconds: Server downtime since the checkpoint.
        extra: Opaque caller-owned fields, persisted verbatim.
    """

    id: SessionId
    species: str
    maturation_at_checkpoint: float = 0.0
    checkpoint_time: float = 0.0
    total_maturation_seconds: float = 0.0
    is_playing: bool = False
    offline_seconds: float = 0.0
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.maturation_at_checkpoint <= 1.0:
            raise InvalidInput(
                f"maturation_at_checkpoint must be within [0, 1], got {self.maturation_at_checkpoint}"
            )
        if self.total_maturation_seconds < 0:
            raise InvalidInput(
                f"total_maturation_seconds cannot be negative, got {self.total_maturation_seconds}"
            )
        if self.offline_seconds < 0:
            raise InvalidInput(f"offline_seconds cannot be negative, got {self.offline_seconds}")
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def new(
        cls,
        session_id: SessionId,
        species: str,
        *,
        now: float,
        total_maturation_seconds: float = 0.0,
        maturation: float = 0.0,
        extra: Mapping[str, Any] | None = None,
    ) -> "SessionClock":
        """Create a paused clock checkpointed at ``now``."""
        return cls(
            id=session_id,
            species=species,
            maturation_at_checkpoint=clamp(maturation),
            checkpoint_time=now,
            total_maturation_seconds=total_maturation_seconds,
            extra=extra or {},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_percentage(self, now: float) -> float:
        """Maturation fraction at ``now`` (0.0 to 1.0)."""
        if not self.is_playing:
            return self.maturation_at_checkpoint
        if self.total_maturation_seconds <= 0:
            return self.maturation_at_checkpoint
        elapsed = (now - self.checkpoint_time) - self.offline_seconds
        progress = max(0.0, elapsed / self.total_maturation_seconds)
        return clamp(self.maturation_at_checkpoint + progress)

    def remaining_seconds(self, now: float) -> float:
        """Growing time left until adulthood at the current rate."""
        return (1.0 - self.current_percentage(now)) * self.total_maturation_seconds

    def retroactive_percentage(
        self,
        transition_time: float,
        old_total_seconds: float,
        new_total_seconds: float,
        now: float,
    ) -> float:
        """Maturation at ``now`` if the rate changed at ``transition_time``.

        Time before the transition integrates against ``old_total_seconds``,
        time after it against ``new_total_seconds``. Downtime is taken from
        the newer segment first. Does not change the clock; see
        ``apply_retroactive_correction`` for the committed form.
        """
        if old_total_seconds <= 0 or new_total_seconds <= 0:
            raise InvalidInput(
                f"Maturation totals must be positive, got {old_total_seconds} -> {new_total_seconds}"
            )
        if not self.is_playing:
            return self.maturation_at_checkpoint

        before = max(0.0, min(now, transition_time) - self.checkpoint_time)
        after = max(0.0, now - max(self.checkpoint_time, transition_time))

        offline = self.offline_seconds
        offline_after = min(offline, after)
        after -= offline_after
        before = max(0.0, before - (offline - offline_after))

        pct = (
            self.maturation_at_checkpoint
            + before / old_total_seconds
            + after / new_total_seconds
        )
        return clamp(pct)

    # ------------------------------------------------------------------
    # Transitions (each returns a new clock)
    # ------------------------------------------------------------------

    def start(self, now: float) -> "SessionClock":
        if self.is_playing:
            return self
        return replace(self, checkpoint_time=now, is_playing=True, offline_seconds=0.0)

    def pause(self, now: float) -> "SessionClock":
        if not self.is_playing:
            return self
        return replace(
            self,
            maturation_at_checkpoint=self.current_percentage(now),
            checkpoint_time=now,
            is_playing=False,
            offline_seconds=0.0,
        )

    def toggle(self, now: float) -> "SessionClock":
        return self.pause(now) if self.is_playing else self.start(now)

    def soft_reset(self, now: float) -> "SessionClock":
        """Fold current progress into the checkpoint without changing play state."""
        return replace(
            self,
            maturation_at_checkpoint=self.current_percentage(now),
            checkpoint_time=now,
            offline_seconds=0.0,
        )

    def apply_retroactive_correction(
        self,
        transition_time: float,
        old_total_seconds: float,
        new_total_seconds: float,
        now: float,
    ) -> "SessionClock":
        """Correct for a rate change that took effect at ``transition_time``.

        Computes the piecewise percentage, adopts ``new_total_seconds`` and
        re-bases the checkpoint at ``now`` in one step, so the correction can
        never be counted twice.
        """
        corrected = self.retroactive_percentage(
            transition_time, old_total_seconds, new_total_seconds, now
        )
        logger.debug(
            "Session %s corrected %.6f -> %.6f (total %.1fs -> %.1fs)",
            self.id,
            self.current_percentage(now),
            corrected,
            old_total_seconds,
            new_total_seconds,
        )
        return replace(
            self,
            maturation_at_checkpoint=corrected,
            checkpoint_time=now,
            total_maturation_seconds=new_total_seconds,
            offline_seconds=0.0,
        )

    def set_total_maturation_seconds(self, total_seconds: float, now: float) -> "SessionClock":
        """Swap the growth denominator, locking in progress made so far."""
        if total_seconds < 0:
            raise InvalidInput(f"total_maturation_seconds cannot be negative, got {total_seconds}")
        return replace(self.soft_reset(now), total_maturation_seconds=total_seconds)

    def add_offline_seconds(self, seconds: float) -> "SessionClock":
        if seconds < 0:
            raise InvalidInput(f"Offline duration cannot be negative, got {seconds}")
        if seconds == 0:
            return self
        return replace(self, offline_seconds=self.offline_seconds + seconds)

    def with_maturation(self, fraction: float, now: float) -> "SessionClock":
        """Manual override, e.g. after the player reads the in-game value."""
        return replace(
            self,
            maturation_at_checkpoint=clamp(fraction),
            checkpoint_time=now,
            offline_seconds=0.0,
        )

    def with_extra(self, **fields: Any) -> "SessionClock":
        merged = dict(self.extra)
        merged.update(fields)
        return replace(self, extra=merged)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_record(self) -> Dict[str, Any]:
        """Flat record for external storage (extras included)."""
        record: Dict[str, Any] = dict(self.extra)
        record.update(
            {
                "id": self.id,
                "species": self.species,
                "maturationAtCheckpoint": self.maturation_at_checkpoint,
                "checkpointTime": self.checkpoint_time,
                "totalMaturationSeconds": self.total_maturation_seconds,
                "isPlaying": self.is_playing,
                "offlineSeconds": self.offline_seconds,
            }
        )
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SessionClock":
        """Rebuild a clock from ``to_record`` output.

        Raises:
            PersistenceError: If the record is malformed.
        """
        try:
            parsed = SessionRecord.model_validate(dict(record))
        except ValidationError as exc:
            raise PersistenceError(f"Invalid session record: {exc}") from exc

        extra = {k: v for k, v in (parsed.model_extra or {}).items() if k not in RECORD_KEYS}
        # The legacy 'creature' key is consumed as the species alias.
        extra.pop("creature", None)
        return cls(
            id=parsed.id,
            species=parsed.species,
            maturation_at_checkpoint=parsed.maturation_at_checkpoint,
            checkpoint_time=parsed.checkpoint_time,
            total_maturation_seconds=parsed.total_maturation_seconds,
            is_playing=parsed.is_playing,
            offline_seconds=parsed.offline_seconds,
            extra=extra,
        )

    @classmethod
    def try_from_record(cls, record: Mapping[str, Any]) -> Result["SessionClock", str]:
        """Like ``from_record`` but returns ``Err`` instead of raising."""
        try:
            return Ok(cls.from_record(record))
        except PersistenceError as exc:
            logger.warning("Discarding unreadable session record: %s", exc)
            return Err(str(exc))
