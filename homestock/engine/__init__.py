from homestock.engine.history import build_history
from homestock.engine.observation import (
    HistoryPoint,
    PlatformStats,
    PriceObservation,
    PriceStats,
    PriceStatsResult,
    parse_observation,
    parse_observations,
)
from homestock.engine.range_filter import filter_by_range, window_cutoff
from homestock.engine.stats import compute_stats

__all__ = [
    "HistoryPoint",
    "PlatformStats",
    "PriceObservation",
    "PriceStats",
    "PriceStatsResult",
    "build_history",
    "compute_stats",
    "filter_by_range",
    "parse_observation",
    "parse_observations",
    "window_cutoff",
]
