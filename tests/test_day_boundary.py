"""Cutoff reconciliation between Duolingo's rollover time and local midnight."""

from datetime import datetime, timedelta, timezone

from duo_core.day_boundary import (
    compute_cutoff, cutoff_for, local_midnight_ts, parse_reported_midnight,
)

from helpers import MIDNIGHT, NOW

T = 1_760_000_000


class TestComputeCutoff:

    def test_aligned_clocks_use_midnight(self):
        assert compute_cutoff(reported_midnight=T, local_midnight=T) == T

    def test_local_ahead_uses_local_midnight(self):
        assert compute_cutoff(reported_midnight=T, local_midnight=T + 3600) == T + 3600

    def test_remote_ahead_uses_remote_unadjusted(self):
        assert compute_cutoff(reported_midnight=T, local_midnight=T - 3600) == T

    def test_is_deterministic(self):
        results = {compute_cutoff(T, T + 17) for _ in range(50)}
        assert results == {T + 17}


class TestLocalMidnight:

    def test_naive_now_uses_local_day(self):
        assert local_midnight_ts(NOW) == MIDNIGHT

    def test_just_before_midnight_stays_on_same_day(self):
        late = datetime(2026, 10, 18, 23, 59, 59)
        assert local_midnight_ts(late) == MIDNIGHT

    def test_aware_now_uses_its_own_zone(self):
        tz = timezone(timedelta(hours=5))
        now = datetime(2026, 10, 18, 3, 0, tzinfo=tz)
        expected = int(datetime(2026, 10, 18, tzinfo=tz).timestamp())
        assert local_midnight_ts(now) == expected


class TestParseReportedMidnight:

    def test_integer_passes_through(self):
        assert parse_reported_midnight(T, NOW) == T

    def test_float_is_truncated(self):
        assert parse_reported_midnight(T + 0.9, NOW) == T

    def test_missing_falls_back_to_now(self):
        assert parse_reported_midnight(None, NOW) == int(NOW.timestamp())

    def test_string_falls_back_to_now(self):
        assert parse_reported_midnight("yesterday", NOW) == int(NOW.timestamp())

    def test_bool_falls_back_to_now(self):
        assert parse_reported_midnight(True, NOW) == int(NOW.timestamp())

    def test_out_of_range_falls_back_to_now(self):
        assert parse_reported_midnight(10**20, NOW) == int(NOW.timestamp())
        assert parse_reported_midnight(float("nan"), NOW) == int(NOW.timestamp())


class TestCutoffFor:

    def test_remote_rolled_over_before_local_midnight(self):
        # Remote reset an hour before our midnight: local boundary wins
        assert cutoff_for(MIDNIGHT - 3600, NOW) == MIDNIGHT

    def test_remote_rolled_over_after_local_midnight(self):
        assert cutoff_for(MIDNIGHT + 1800, NOW) == MIDNIGHT + 1800

    def test_unparseable_means_nothing_counts_yet(self):
        assert cutoff_for("garbage", NOW) == int(NOW.timestamp())
