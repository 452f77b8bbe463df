"""Affinity scoring and match-type classification."""

from .affinity import AffinityScorer, AffinityResult, ScoringConfig, create_scorer_from_config

__all__ = [
    "AffinityScorer",
    "AffinityResult",
    "ScoringConfig",
    "create_scorer_from_config",
]
