"""
Affinity scoring for a set of commonalities.

This module reduces a pair's commonalities to a single score and a match
type. The score compresses the summed weights with diminishing returns so
that many generic overlaps cannot outrun a few strong ones.

Scoring Formula:
    score = 1 - exp(-k * sum(weights))

Classification:
    high-affinity: score >= high_affinity_threshold
                   AND >= 1 professional AND >= 1 values commonality
    strategic:     otherwise, score >= strategic_threshold
    (no match):    below strategic_threshold
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Sequence

import numpy as np

from ..errors import ComputationError
from ..models import Commonality, MatchType
from ..questionnaire.schema import CommonalityCategory

logger = logging.getLogger(__name__)


@dataclass
class ScoringConfig:
    """
    Configuration for affinity scoring.

    Attributes:
        k: Diminishing-returns factor applied to the weight sum
        high_affinity_threshold: Minimum score for a high-affinity match
        strategic_threshold: Minimum score for any match
    """
    k: float = 0.7
    high_affinity_threshold: float = 0.6
    strategic_threshold: float = 0.35

    def validate(self) -> None:
        """Validate configuration values."""
        if self.k <= 0:
            raise ValueError(f"k must be positive, got {self.k}")
        if not 0 <= self.strategic_threshold <= self.high_affinity_threshold <= 1:
            raise ValueError(
                f"Thresholds must satisfy 0 <= strategic <= high_affinity <= 1, got "
                f"{self.strategic_threshold} and {self.high_affinity_threshold}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoringConfig":
        """Create from main config dictionary."""
        scoring_config = config.get("scoring", {})
        return cls(
            k=scoring_config.get("k", 0.7),
            high_affinity_threshold=scoring_config.get("high_affinity_threshold", 0.6),
            strategic_threshold=scoring_config.get("strategic_threshold", 0.35),
        )


@dataclass(frozen=True)
class AffinityResult:
    """
    Result of affinity scoring.

    Attributes:
        score: Compressed affinity score in [0, 1]
        type: Match type, or None when the pair falls below the strategic threshold
        weight_sum: Uncompressed sum of commonality weights
    """
    score: float
    type: Optional[MatchType]
    weight_sum: float

    @property
    def is_match(self) -> bool:
        return self.type is not None


class AffinityScorer:
    """
    Scores commonality sets and classifies the pairing.

    Attributes:
        config: ScoringConfig with the compression factor and thresholds
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()
        self.config.validate()
        logger.debug(f"Initialized AffinityScorer with k={self.config.k}, "
                     f"thresholds={self.config.high_affinity_threshold}/"
                     f"{self.config.strategic_threshold}")

    def score(self, commonalities: Sequence[Commonality]) -> AffinityResult:
        """
        Score a commonality set.

        Args:
            commonalities: Commonalities shared by a pair

        Returns:
            AffinityResult with score, type (or None) and weight sum

        Raises:
            ComputationError: If any weight is outside (0, 1] or not finite
        """
        weights = np.array([c.weight for c in commonalities], dtype=float)
        if weights.size and (not np.all(np.isfinite(weights))
                             or np.any(weights <= 0) or np.any(weights > 1)):
            bad = [float(w) for w in weights if not (np.isfinite(w) and 0 < w <= 1)]
            raise ComputationError(f"Commonality weights must be in (0, 1], got {bad}")

        weight_sum = float(weights.sum())
        score = self.compress(weight_sum)
        match_type = self.classify(score, commonalities)
        return AffinityResult(score=score, type=match_type, weight_sum=weight_sum)

    def compress(self, weight_sum: float) -> float:
        """Map a weight sum onto [0, 1] with diminishing returns."""
        score = 1.0 - np.exp(-self.config.k * weight_sum)
        return float(np.clip(score, 0.0, 1.0))

    def classify(self, score: float, commonalities: Sequence[Commonality]) -> Optional[MatchType]:
        """
        Classify a scored pair.

        Args:
            score: Compressed affinity score
            commonalities: Commonalities the score came from

        Returns:
            MatchType, or None if the pair should not be emitted
        """
        categories = {c.category for c in commonalities}
        if (score >= self.config.high_affinity_threshold
                and CommonalityCategory.PROFESSIONAL in categories
                and CommonalityCategory.VALUES in categories):
            return MatchType.HIGH_AFFINITY
        if score >= self.config.strategic_threshold:
            return MatchType.STRATEGIC
        return None


def create_scorer_from_config(config: Dict[str, Any]) -> AffinityScorer:
    """
    Factory function to create an AffinityScorer from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured AffinityScorer instance
    """
    return AffinityScorer(ScoringConfig.from_config(config))
