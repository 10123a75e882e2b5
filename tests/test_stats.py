"""
Tests for engine/stats.py: per-platform max / min / trailing-year average.

"Today" is pinned to 2024-06-01, so the trailing window starts 2023-06-02.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from homestock.config import Platform, PriceRange
from homestock.engine.observation import PlatformStats, PriceObservation
from homestock.engine.stats import compute_stats

TODAY = date(2024, 6, 1)
CUTOFF = TODAY - timedelta(days=365)


def _obs(platform: str, price: str, recorded_at: date) -> PriceObservation:
    return PriceObservation(platform=Platform(platform), price=Decimal(price), recorded_at=recorded_at)


class TestEmptyAndSingle:

    def test_no_observations_leaves_every_platform_unset(self) -> None:
        stats = compute_stats([], PriceRange.ALL, TODAY)
        for platform in Platform:
            assert stats.for_platform(platform) == PlatformStats(max=None, min=None, avg1y=None)

    def test_single_observation_in_window(self) -> None:
        stats = compute_stats([_obs("jd", "19.90", date(2024, 5, 1))], PriceRange.ALL, TODAY)
        assert stats.jd.max == stats.jd.min == Decimal("19.90")
        assert stats.jd.avg1y == Decimal("19.90")

    def test_single_observation_outside_window(self) -> None:
        stats = compute_stats([_obs("jd", "19.90", date(2020, 5, 1))], PriceRange.ALL, TODAY)
        assert stats.jd.max == stats.jd.min == Decimal("19.90")
        assert stats.jd.avg1y is None

    def test_platforms_without_data_unset_not_zero(self) -> None:
        stats = compute_stats([_obs("tmall", "8", TODAY)], PriceRange.ALL, TODAY)
        assert stats.jd.max is None
        assert stats.pdd.avg1y is None
        assert stats.tmall.max == Decimal("8")


class TestAggregation:

    def test_scenario_two_days_inside_window(self) -> None:
        observations = [
            _obs("jd", "10", date(2024, 1, 1)),
            _obs("jd", "12", date(2024, 1, 2)),
            _obs("tmall", "11", date(2024, 1, 2)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)

        assert stats.jd == PlatformStats(max=Decimal("12"), min=Decimal("10"), avg1y=Decimal("11"))
        assert stats.tmall == PlatformStats(max=Decimal("11"), min=Decimal("11"), avg1y=Decimal("11"))

    def test_same_scenario_outside_window_has_no_average(self) -> None:
        observations = [
            _obs("jd", "10", date(2024, 1, 1)),
            _obs("jd", "12", date(2024, 1, 2)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, date(2025, 6, 1))

        assert stats.jd.max == Decimal("12")
        assert stats.jd.min == Decimal("10")
        assert stats.jd.avg1y is None

    def test_average_is_unweighted_mean_of_samples(self) -> None:
        observations = [
            _obs("pdd", "10", date(2024, 1, 1)),
            _obs("pdd", "20", date(2024, 5, 30)),
            _obs("pdd", "30", date(2024, 5, 31)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)
        assert stats.pdd.avg1y == Decimal("20")

    def test_average_uses_only_window_observations(self) -> None:
        observations = [
            _obs("jd", "100", CUTOFF - timedelta(days=1)),
            _obs("jd", "10", CUTOFF),
            _obs("jd", "20", TODAY),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)

        assert stats.jd.avg1y == Decimal("15")
        # max/min still see the old observation for range=all
        assert stats.jd.max == Decimal("100")
        assert stats.jd.min == Decimal("10")

    def test_average_has_no_float_drift(self) -> None:
        """0.1 + 0.2 summed as floats would give 0.30000000000000004."""
        observations = [
            _obs("jd", "0.10", date(2024, 5, 1)),
            _obs("jd", "0.20", date(2024, 5, 2)),
            _obs("jd", "0.30", date(2024, 5, 3)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)
        assert stats.jd.avg1y == Decimal("0.2")

    def test_average_keeps_sub_cent_precision(self) -> None:
        observations = [
            _obs("tmall", "10.00", date(2024, 5, 1)),
            _obs("tmall", "10.01", date(2024, 5, 2)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)
        assert stats.tmall.avg1y == Decimal("10.005")

    def test_average_is_not_rounded_to_cents(self) -> None:
        observations = [
            _obs("jd", "10", date(2024, 5, 1)),
            _obs("jd", "10", date(2024, 5, 2)),
            _obs("jd", "11", date(2024, 5, 3)),
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)

        assert stats.jd.avg1y == Decimal(31) / 3
        assert stats.jd.avg1y > Decimal("10.33")

    def test_max_never_below_min(self) -> None:
        observations = [
            _obs(platform, price, date(2024, 1, day))
            for day, price in enumerate(["5", "3.2", "8.8", "4", "7.1"], start=1)
            for platform in ("jd", "tmall", "pdd")
        ]
        stats = compute_stats(observations, PriceRange.ALL, TODAY)
        for platform in Platform:
            s = stats.for_platform(platform)
            assert s.max == Decimal("8.8")
            assert s.min == Decimal("3.2")
            assert s.max >= s.min


class TestRangeIndependence:

    def test_one_year_range_limits_extremes(self) -> None:
        observations = [
            _obs("jd", "100", date(2022, 1, 1)),
            _obs("jd", "10", date(2024, 1, 1)),
            _obs("jd", "12", date(2024, 2, 1)),
        ]
        stats = compute_stats(observations, PriceRange.ONE_YEAR, TODAY)

        assert stats.jd.max == Decimal("12")
        assert stats.jd.min == Decimal("10")
        assert stats.jd.avg1y == Decimal("11")

    def test_one_year_range_with_only_old_data_unsets_everything(self) -> None:
        stats = compute_stats([_obs("pdd", "4", date(2021, 3, 3))], PriceRange.ONE_YEAR, TODAY)
        assert stats.pdd == PlatformStats()

    def test_average_identical_for_both_ranges(self) -> None:
        observations = [
            _obs("jd", "50", date(2019, 1, 1)),
            _obs("jd", "10", date(2024, 1, 1)),
            _obs("jd", "14", date(2024, 3, 1)),
        ]
        all_stats = compute_stats(observations, PriceRange.ALL, TODAY)
        year_stats = compute_stats(observations, PriceRange.ONE_YEAR, TODAY)

        assert all_stats.jd.avg1y == year_stats.jd.avg1y == Decimal("12")
        assert all_stats.jd.max == Decimal("50")
        assert year_stats.jd.max == Decimal("14")
