"""Tests for the per-creature maturation clock."""

import pytest

from nursery.exceptions import InvalidInput, PersistenceError
from nursery.session_clock import SessionClock

T0 = 1_700_000_000.0


def playing_clock(total=3600.0, maturation=0.0, now=T0):
    return SessionClock.new("rex-1", "Rex", now=now, total_maturation_seconds=total, maturation=maturation).start(now)


class TestProgress:
    def test_half_grown_after_half_the_time(self):
        clock = playing_clock()
        assert clock.current_percentage(T0 + 1800) == pytest.approx(0.50, abs=0.001)

    def test_new_clock_is_paused(self):
        clock = SessionClock.new("rex-1", "Rex", now=T0, total_maturation_seconds=3600.0)

        assert not clock.is_playing
        assert clock.current_percentage(T0 + 10_000) == 0.0

    def test_pause_freezes_progress(self):
        paused = playing_clock().pause(T0 + 1800)

        assert paused.current_percentage(T0 + 1800) == pytest.approx(0.50)
        assert paused.current_percentage(T0 + 2400) == pytest.approx(0.50)

        resumed = paused.start(T0 + 2400)
        assert resumed.current_percentage(T0 + 2400) == pytest.approx(0.50)
        assert resumed.current_percentage(T0 + 2760) == pytest.approx(0.60)

    def test_progress_is_monotonic_while_playing(self):
        clock = playing_clock(maturation=0.2)
        readings = [clock.current_percentage(T0 + step * 300) for step in range(20)]

        assert readings == sorted(readings)

    def test_progress_is_clamped(self):
        clock = playing_clock(maturation=0.9)

        assert clock.current_percentage(T0 + 100_000) == 1.0
        assert clock.current_percentage(T0 - 500) == pytest.approx(0.9)

    def test_zero_total_keeps_checkpoint(self):
        clock = playing_clock(total=0.0, maturation=0.4)
        assert clock.current_percentage(T0 + 1000) == pytest.approx(0.4)

    def test_remaining_seconds(self):
        clock = playing_clock()
        assert clock.remaining_seconds(T0 + 900) == pytest.approx(2700.0)

    def test_offline_time_is_not_growth(self):
        clock = playing_clock().add_offline_seconds(600)
        assert clock.current_percentage(T0 + 1800) == pytest.approx(1200 / 3600)

    def test_negative_offline_time_is_rejected(self):
        with pytest.raises(InvalidInput):
            playing_clock().add_offline_seconds(-1)


class TestTransitions:
    def test_start_is_idempotent(self):
        clock = playing_clock()
        assert clock.start(T0 + 500) is clock

    def test_pause_is_idempotent(self):
        paused = playing_clock().pause(T0 + 100)
        assert paused.pause(T0 + 200) is paused

    def test_start_discards_stale_offline_time(self):
        paused = playing_clock().add_offline_seconds(300).pause(T0 + 1800)
        assert paused.start(T0 + 2000).offline_seconds == 0.0

    def test_toggle(self):
        clock = playing_clock()
        paused = clock.toggle(T0 + 360)

        assert not paused.is_playing
        assert paused.toggle(T0 + 400).is_playing

    def test_transitions_return_new_values(self):
        clock = playing_clock()
        paused = clock.pause(T0 + 1800)

        assert clock.is_playing
        assert clock.maturation_at_checkpoint == 0.0
        assert paused is not clock

    def test_soft_reset_preserves_progress(self):
        clock = playing_clock().add_offline_seconds(100)
        reset = clock.soft_reset(T0 + 1000)

        assert reset.checkpoint_time == T0 + 1000
        assert reset.offline_seconds == 0.0
        assert reset.is_playing
        assert reset.current_percentage(T0 + 1000) == pytest.approx(clock.current_percentage(T0 + 1000))
        assert reset.current_percentage(T0 + 2000) == pytest.approx(clock.current_percentage(T0 + 2000))

    def test_set_total_locks_in_progress(self):
        faster = playing_clock().set_total_maturation_seconds(1800.0, T0 + 1800)

        assert faster.current_percentage(T0 + 1800) == pytest.approx(0.5)
        assert faster.current_percentage(T0 + 2700) == pytest.approx(1.0)

    def test_negative_total_is_rejected(self):
        with pytest.raises(InvalidInput):
            playing_clock().set_total_maturation_seconds(-1.0, T0)

    def test_manual_override_is_clamped(self):
        clock = playing_clock()

        assert clock.with_maturation(1.5, T0 + 10).maturation_at_checkpoint == 1.0
        assert clock.with_maturation(-0.2, T0 + 10).maturation_at_checkpoint == 0.0

    def test_manual_override_rebases_checkpoint(self):
        clock = playing_clock().with_maturation(0.25, T0 + 600)
        assert clock.current_percentage(T0 + 960) == pytest.approx(0.35)

    def test_invalid_checkpoint_is_rejected(self):
        with pytest.raises(InvalidInput):
            SessionClock(id=1, species="Rex", maturation_at_checkpoint=1.2)


class TestRetroactiveCorrection:
    def test_rate_doubles_mid_session(self):
        clock = playing_clock()
        transition = T0 + 600

        at_transition = clock.retroactive_percentage(transition, 3600.0, 1800.0, transition)
        later = clock.retroactive_percentage(transition, 3600.0, 1800.0, transition + 600)

        assert at_transition == pytest.approx(600 / 3600, abs=1e-4)
        assert later == pytest.approx(0.50, abs=1e-3)

    def test_equal_totals_match_current_percentage(self):
        clock = playing_clock(maturation=0.1).add_offline_seconds(120)
        now = T0 + 1500

        assert clock.retroactive_percentage(T0 + 400, 3600.0, 3600.0, now) == pytest.approx(
            clock.current_percentage(now)
        )

    def test_offline_time_comes_from_newer_segment_first(self):
        clock = playing_clock().add_offline_seconds(300)
        pct = clock.retroactive_percentage(T0 + 600, 3600.0, 1800.0, T0 + 1200)

        assert pct == pytest.approx(600 / 3600 + 300 / 1800)

    def test_transition_before_checkpoint_uses_new_rate_only(self):
        clock = playing_clock()
        pct = clock.retroactive_percentage(T0 - 1000, 3600.0, 1800.0, T0 + 900)

        assert pct == pytest.approx(0.5)

    def test_paused_clock_is_unaffected(self):
        paused = playing_clock().pause(T0 + 900)
        assert paused.retroactive_percentage(T0 + 100, 3600.0, 1800.0, T0 + 5000) == pytest.approx(0.25)

    def test_non_positive_totals_are_rejected(self):
        with pytest.raises(InvalidInput):
            playing_clock().retroactive_percentage(T0, 0.0, 1800.0, T0 + 10)

    def test_committed_correction_is_continuous(self):
        clock = playing_clock().add_offline_seconds(60)
        now = T0 + 1200
        expected = clock.retroactive_percentage(T0 + 600, 3600.0, 1800.0, now)

        corrected = clock.apply_retroactive_correction(T0 + 600, 3600.0, 1800.0, now)

        assert corrected.current_percentage(now) == pytest.approx(expected)
        assert corrected.total_maturation_seconds == 1800.0
        assert corrected.checkpoint_time == now
        assert corrected.offline_seconds == 0.0
        # Progress continues at the new rate from the corrected value.
        assert corrected.current_percentage(now + 180) == pytest.approx(expected + 0.1)


class TestPersistence:
    def test_round_trip(self):
        clock = playing_clock(maturation=0.3).add_offline_seconds(42).with_extra(nickname="Chomper", level=31)
        restored = SessionClock.from_record(clock.to_record())

        assert restored == clock
        assert restored.current_percentage(T0 + 777) == clock.current_percentage(T0 + 777)

    def test_record_shape(self):
        record = playing_clock().with_extra(nickname="Chomper").to_record()

        assert record["id"] == "rex-1"
        assert record["species"] == "Rex"
        assert record["isPlaying"] is True
        assert record["totalMaturationSeconds"] == 3600.0
        assert record["nickname"] == "Chomper"

    def test_legacy_creature_key(self):
        clock = SessionClock.from_record({"id": 7, "creature": "Rex", "checkpointTime": T0, "maturationAtCheckpoint": 0.5})

        assert clock.species == "Rex"
        assert clock.maturation_at_checkpoint == 0.5
        assert "creature" not in clock.extra

    def test_malformed_record_raises(self):
        with pytest.raises(PersistenceError):
            SessionClock.from_record({"id": 1, "species": "Rex", "checkpointTime": "yesterday"})

    def test_out_of_range_record_raises(self):
        with pytest.raises(PersistenceError):
            SessionClock.from_record({"id": 1, "species": "Rex", "checkpointTime": T0, "maturationAtCheckpoint": 1.5})

    def test_try_from_record_returns_err(self):
        result = SessionClock.try_from_record({"species": "Rex"})

        assert result.is_err()
        assert "Invalid session record" in result.error

    def test_try_from_record_returns_ok(self):
        clock = playing_clock()
        assert SessionClock.try_from_record(clock.to_record()).unwrap() == clock
