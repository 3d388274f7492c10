"""External facts pushed into the core.

Two collaborators outside the core feed it:

- the rates poller reports official multiplier changes (``RateChangeEvent``);
- the server watcher reports online/offline transitions (``ServerStatusEvent``).

Raw payloads are validated through ``nursery.models`` and parsed into these
frozen dataclasses; parsing returns a ``Result`` so a garbled poll can be
logged and skipped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from pydantic import ValidationError

from nursery.models import RateChangePayload, ServerStatusPayload
from nursery.result import Err, Ok, Result


class ServerStatus(Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class RateChangeEvent:
    """Official rates as of ``effective_at`` (epoch seconds)."""

    effective_at: float
    maturation_multiplier: float = 1.0
    hatch_multiplier: float = 1.0
    consumption_multiplier: float = 1.0


@dataclass(frozen=True)
class ServerStatusEvent:
    """A server has been ``status`` since ``since`` (epoch seconds)."""

    status: ServerStatus
    since: float

    @property
    def is_offline(self) -> bool:
        return self.status is ServerStatus.OFFLINE


def parse_rate_change(payload: Mapping[str, Any]) -> Result[RateChangeEvent, str]:
    try:
        parsed = RateChangePayload.model_validate(dict(payload))
    except ValidationError as exc:
        return Err(f"Invalid rate payload: {exc}")
    return Ok(
        RateChangeEvent(
            effective_at=parsed.effective_at,
            maturation_multiplier=parsed.maturation_multiplier,
            hatch_multiplier=parsed.hatch_multiplier,
            consumption_multiplier=parsed.consumption_multiplier,
        )
    )


def parse_server_status(payload: Mapping[str, Any]) -> Result[ServerStatusEvent, str]:
    try:
        parsed = ServerStatusPayload.model_validate(dict(payload))
    except ValidationError as exc:
        return Err(f"Invalid server status payload: {exc}")
    return Ok(ServerStatusEvent(status=ServerStatus(parsed.status), since=parsed.since))
