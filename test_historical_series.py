"""
Tests for the synthetic 24 hour trend series.
"""

from datetime import datetime

import pytz

from calculations import deterministic_random, generate_historical_series
from calculations.historical_series import base_signal_for_hour, seasonal_bonus
from models import QualityLevel

NOW = datetime(2026, 1, 15, 14, 37, tzinfo=pytz.utc)


def test_deterministic_random_is_stable_and_bounded():
    values = [deterministic_random(42, i, o) for i in range(24) for o in range(5)]
    assert values == [deterministic_random(42, i, o) for i in range(24) for o in range(5)]
    assert all(0 <= v < 1 for v in values)
    assert deterministic_random(42, 0, 0) != deterministic_random(43, 0, 0)


def test_same_seed_same_series():
    assert generate_historical_series(seed=7, now=NOW) == generate_historical_series(seed=7, now=NOW)


def test_different_seed_different_series():
    assert generate_historical_series(seed=7, now=NOW) != generate_historical_series(seed=8, now=NOW)


def test_series_shape_and_order():
    samples = generate_historical_series(seed=1, now=NOW)

    assert len(samples) == 24
    times = [s.fullTime for s in samples]
    assert times == sorted(times)
    assert len(set(times)) == 24
    assert samples[-1].fullTime == '2026-01-15T14:00:00Z'
    assert samples[0].fullTime == '2026-01-14T15:00:00Z'
    assert samples[-1].time == '02:00 PM'


def test_values_within_ranges():
    for seed in range(20):
        for s in generate_historical_series(seed=seed, now=NOW):
            assert 10 <= s.signal <= 90
            assert 1.5 <= s.muf <= 3.0
            assert 1 <= s.absorption <= 6
            assert 0 <= s.kp <= 9
            assert 60 <= s.sfi <= 300
            assert s.quality == QualityLevel.from_signal(s.signal)
            assert s.snr == max(0, round((s.signal - 30) * 0.6))


def test_timezone_changes_labels_only_for_hour_of_day():
    utc = generate_historical_series(seed=3, now=NOW)
    tokyo = generate_historical_series(seed=3, now=NOW, tz='Asia/Tokyo')

    assert [s.fullTime for s in utc] == [s.fullTime for s in tokyo]
    assert tokyo[-1].time == '11:00 PM'


def test_base_signal_day_night_cycle():
    assert base_signal_for_hour(0) == 65
    assert base_signal_for_hour(19) == 65
    assert base_signal_for_hour(8) == 45
    assert base_signal_for_hour(13) == 25


def test_winter_bonus():
    assert seasonal_bonus(12) == 10
    assert seasonal_bonus(2) == 10
    assert seasonal_bonus(3) == 0
    assert seasonal_bonus(7) == 0


def test_quality_thresholds():
    assert QualityLevel.from_signal(61) == QualityLevel.EXCELLENT
    assert QualityLevel.from_signal(60) == QualityLevel.GOOD
    assert QualityLevel.from_signal(41) == QualityLevel.GOOD
    assert QualityLevel.from_signal(40) == QualityLevel.FAIR
    assert QualityLevel.from_signal(25) == QualityLevel.POOR
    assert QualityLevel.POOR < QualityLevel.FAIR < QualityLevel.GOOD < QualityLevel.EXCELLENT


def test_quality_and_snr_follow_reported_signal():
    for seed in range(20):
        for sample in generate_historical_series(seed=seed, now=NOW):
            assert isinstance(sample.signal, int)
            assert sample.quality == QualityLevel.from_signal(sample.signal)
            assert sample.snr == max(0, int(round((sample.signal - 30) * 0.6)))
