"""Session tracking service.

``SessionTracker`` owns the maturation clocks of every tracked creature and
is the single place external facts are folded in:

- rate changes from the rates poller (``apply_rate_change``),
- downtime reports from the server watcher (``apply_server_status``).

The tracker is an explicit collaborator: it is handed its catalog, current
rate settings and a ``Clock`` at construction, and holds no process-wide
state. Clocks are immutable, so every operation stores the new value and
returns it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from nursery.catalog import Catalog
from nursery.clock import Clock, SystemClock
from nursery.events import RateChangeEvent, ServerStatus, ServerStatusEvent
from nursery.exceptions import Unresolvable
from nursery.maturation import total_maturation_seconds
from nursery.session_clock import SessionClock, SessionId
from nursery.stats import RateSettings

logger = logging.getLogger(__name__)

# Bookkeeping kept in each session's extras so it survives persistence.
LAST_STATUS_KEY = "lastServerStatus"
ACCOUNTED_UNTIL_KEY = "offlineAccountedUntil"


@dataclass(frozen=True)
class DowntimeUpdate:
    """Outcome of one server status report for one session.

    Attributes:
        session: The updated clock.
        offline_seconds_added: Downtime newly deducted from growth.
        needs_verification: The server just came back online; the player
            should double-check the in-game maturation.
    """

    session: SessionClock
    offline_seconds_added: float
    needs_verification: bool


class SessionTracker:
    """Owns the maturation clocks for a set of creatures."""

    def __init__(
        self,
        catalog: Catalog,
        settings: Optional[RateSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or RateSettings()
        self.settings.validate()
        self.clock: Clock = clock or SystemClock()
        self._sessions: Dict[SessionId, SessionClock] = {}

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def track(
        self,
        session_id: SessionId,
        species_name: str,
        maturation: float = 0.0,
        *,
        playing: bool = False,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> SessionClock:
        """Start tracking a creature (replaces any session with the same id)."""
        species = self.catalog.species(species_name)
        now = self.clock.now()
        session = SessionClock.new(
            session_id,
            species.name,
            now=now,
            total_maturation_seconds=total_maturation_seconds(species, self.settings),
            maturation=maturation,
            extra=extra,
        )
        if playing:
            session = session.start(now)
        self._sessions[session_id] = session
        logger.debug("Tracking %s (%s) at %.4f", session_id, species.name, session.maturation_at_checkpoint)
        return session

    def get(self, session_id: SessionId) -> SessionClock:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise Unresolvable(f"Unknown session: {session_id!r}") from None

    def remove(self, session_id: SessionId) -> Optional[SessionClock]:
        return self._sessions.pop(session_id, None)

    def sessions(self) -> List[SessionClock]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def _store(self, session: SessionClock) -> SessionClock:
        self._sessions[session.id] = session
        return session

    def _settle_downtime(self, session: SessionClock, now: float) -> SessionClock:
        """Deduct the unreported part of an ongoing outage up to ``now``.

        Runs before any transition that moves the checkpoint, which would
        otherwise drop downtime accumulated since the last offline report.
        """
        if not session.is_playing or session.extra.get(LAST_STATUS_KEY) != ServerStatus.OFFLINE.value:
            return session
        accounted_until = session.extra.get(ACCOUNTED_UNTIL_KEY)
        window_start = session.checkpoint_time
        if accounted_until is not None:
            window_start = max(window_start, accounted_until)
        added = max(0.0, now - window_start)
        if added:
            logger.debug("Settling %.0fs of downtime for session %s", added, session.id)
        return session.add_offline_seconds(added).with_extra(**{ACCOUNTED_UNTIL_KEY: now})

    def start(self, session_id: SessionId) -> SessionClock:
        return self._store(self.get(session_id).start(self.clock.now()))

    def pause(self, session_id: SessionId) -> SessionClock:
        now = self.clock.now()
        return self._store(self._settle_downtime(self.get(session_id), now).pause(now))

    def set_maturation(self, session_id: SessionId, fraction: float) -> SessionClock:
        now = self.clock.now()
        return self._store(self._settle_downtime(self.get(session_id), now).with_maturation(fraction, now))

    def percentage(self, session_id: SessionId) -> float:
        return self.get(session_id).current_percentage(self.clock.now())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> List[Dict[str, Any]]:
        return [session.to_record() for session in self._sessions.values()]

    def restore(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Load persisted sessions; unreadable records are skipped.

        Returns:
            Number of sessions restored.
        """
        restored = 0
        for record in records:
            result = SessionClock.try_from_record(record)
            if result.is_err():
                continue
            self._store(result.unwrap())
            restored += 1
        logger.info("Restored %d sessions", restored)
        return restored

    # ------------------------------------------------------------------
    # External facts
    # ------------------------------------------------------------------

    def apply_rate_change(self, event: RateChangeEvent) -> RateSettings:
        """Adopt new official rates, correcting every clock retroactively.

        Playing clocks integrate the time before ``event.effective_at``
        against their old total and the time after it against the new one.
        Paused clocks only pick up the new total.

        Returns:
            The updated rate settings (also stored on the tracker).
        """
        old_settings = self.settings
        new_settings = old_settings.with_rates(
            maturation_speed=event.maturation_multiplier,
            hatch_speed=event.hatch_multiplier,
            consumption_speed=event.consumption_multiplier,
        )
        self.settings = new_settings

        if new_settings.maturation_speed == old_settings.maturation_speed:
            logger.debug("Rates verified: maturation %.2fx (no change)", new_settings.maturation_speed)
            return new_settings

        logger.info(
            "Maturation rate changed %.2fx -> %.2fx; correcting %d sessions",
            old_settings.maturation_speed,
            new_settings.maturation_speed,
            len(self._sessions),
        )
        now = self.clock.now()
        for session in list(self._sessions.values()):
            try:
                species = self.catalog.species(session.species)
            except Unresolvable:
                logger.warning("Session %s has unknown species %r; not corrected", session.id, session.species)
                continue

            new_total = total_maturation_seconds(species, new_settings)
            if session.is_playing:
                old_total = session.total_maturation_seconds
                if old_total <= 0:
                    old_total = total_maturation_seconds(species, old_settings)
                session = self._settle_downtime(session, now)
                self._store(
                    session.apply_retroactive_correction(event.effective_at, old_total, new_total, now)
                )
            else:
                self._store(session.set_total_maturation_seconds(new_total, now))
        return new_settings

    def apply_server_status(self, session_id: SessionId, event: ServerStatusEvent) -> DowntimeUpdate:
        """Fold a server status report into one session.

        Offline reports deduct the downtime since ``event.since`` (or since
        the previous report of the same outage) from the creature's growth.
        The first online report after an outage closes the window at
        ``event.since`` and asks the player to verify.
        """
        session = self.get(session_id)
        now = self.clock.now()
        last_status = session.extra.get(LAST_STATUS_KEY)
        accounted_until = session.extra.get(ACCOUNTED_UNTIL_KEY)

        added = 0.0
        needs_verification = False

        if event.status is ServerStatus.OFFLINE:
            window_start = event.since
            if last_status == ServerStatus.OFFLINE.value and accounted_until is not None:
                window_start = max(window_start, accounted_until)
            window_start = max(window_start, session.checkpoint_time)
            if session.is_playing:
                added = max(0.0, now - window_start)
            session = session.add_offline_seconds(added).with_extra(
                **{LAST_STATUS_KEY: ServerStatus.OFFLINE.value, ACCOUNTED_UNTIL_KEY: now}
            )
            if added:
                logger.info("Server offline for session %s; paused growth for %.0fs", session.id, added)
        else:
            if last_status == ServerStatus.OFFLINE.value:
                needs_verification = True
                if session.is_playing and accounted_until is not None:
                    window_start = max(accounted_until, session.checkpoint_time)
                    added = max(0.0, min(event.since, now) - window_start)
                    session = session.add_offline_seconds(added)
                logger.warning(
                    "Server back online for session %s; adjusted for downtime, verify maturation manually",
                    session.id,
                )
            session = session.with_extra(
                **{LAST_STATUS_KEY: ServerStatus.ONLINE.value, ACCOUNTED_UNTIL_KEY: None}
            )

        self._store(session)
        return DowntimeUpdate(
            session=session, offline_seconds_added=added, needs_verification=needs_verification
        )
