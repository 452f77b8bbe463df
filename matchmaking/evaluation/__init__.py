"""Descriptive metrics over generated matches."""

from .metrics import (
    ScoreDistributionStats,
    MatchQualityMetrics,
    compute_score_distribution_stats,
    calculate_match_quality_metrics,
    matches_to_frame,
)

__all__ = [
    "ScoreDistributionStats",
    "MatchQualityMetrics",
    "compute_score_distribution_stats",
    "calculate_match_quality_metrics",
    "matches_to_frame",
]
