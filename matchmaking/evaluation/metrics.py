"""
Quality metrics for generated matches.

There is no ground truth for whether two attendees "should" meet, so these
metrics describe the output rather than grade it:
1. Average score and score distribution
2. Counts per match type
3. Which commonality categories drive the matches

Use them to calibrate thresholds and importances, not as accuracy figures.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Any, Iterable, Optional

import numpy as np
import pandas as pd

from ..models import Match, MatchType
from ..questionnaire.schema import CATEGORY_ORDER

logger = logging.getLogger(__name__)

MATCH_FRAME_COLUMNS = [
    "match_id", "user_id", "matched_user_id", "matched_user_name", "type", "score",
    "commonality_count", "categories", "top_commonality", "conversation_starters",
    "viewed", "passed", "generated_at",
]


@dataclass
class ScoreDistributionStats:
    """Statistics about the score distribution."""
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()},
        }


@dataclass
class MatchQualityMetrics:
    """
    Aggregate quality metrics over a list of matches.

    Attributes:
        average_score: Mean match score, 0 for no matches
        high_affinity_count: Number of high-affinity matches
        strategic_count: Number of strategic matches
        category_distribution: Commonality count per category value
        distribution: Score distribution, absent for no matches
    """
    average_score: float
    high_affinity_count: int
    strategic_count: int
    category_distribution: Dict[str, int] = field(default_factory=dict)
    distribution: Optional[ScoreDistributionStats] = None

    @property
    def total(self) -> int:
        return self.high_affinity_count + self.strategic_count

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "averageScore": float(self.average_score),
            "highAffinityCount": int(self.high_affinity_count),
            "strategicCount": int(self.strategic_count),
            "categoryDistribution": dict(self.category_distribution),
        }
        if self.distribution is not None:
            result["scoreDistribution"] = self.distribution.to_dict()
        return result

    def save(self, filepath: str) -> None:
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved match metrics to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the metrics."""
        lines = [
            f"Match Quality ({self.total} matches)",
            "=" * 50,
            f"  Average score:  {self.average_score:.4f}",
            f"  High-affinity:  {self.high_affinity_count}",
            f"  Strategic:      {self.strategic_count}",
            "",
            "Commonality Categories:",
        ]
        for category, count in self.category_distribution.items():
            lines.append(f"  {category}: {count}")

        if self.distribution is not None:
            lines.extend(["", "Score Distribution:"])
            for q_name, q_value in self.distribution.quantiles.items():
                lines.append(f"  {q_name}: {q_value:.4f}")

        return "\n".join(lines)


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for match scores.

    Args:
        scores: Array of match scores
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict,
    )


def calculate_match_quality_metrics(matches: Iterable[Match]) -> MatchQualityMetrics:
    """
    Calculate quality metrics for a list of matches.

    Args:
        matches: Matches to summarize

    Returns:
        MatchQualityMetrics; all zeros for an empty list
    """
    matches = list(matches)
    categories = Counter(c.category for m in matches for c in m.commonalities)
    distribution = {cat.value: categories.get(cat, 0) for cat in CATEGORY_ORDER}

    if not matches:
        return MatchQualityMetrics(
            average_score=0.0,
            high_affinity_count=0,
            strategic_count=0,
            category_distribution=distribution,
        )

    scores = np.array([m.score for m in matches], dtype=float)
    types = Counter(m.type for m in matches)

    return MatchQualityMetrics(
        average_score=float(np.mean(scores)),
        high_affinity_count=types.get(MatchType.HIGH_AFFINITY, 0),
        strategic_count=types.get(MatchType.STRATEGIC, 0),
        category_distribution=distribution,
        distribution=compute_score_distribution_stats(scores),
    )


def matches_to_frame(matches: Iterable[Match]) -> pd.DataFrame:
    """
    Flatten matches into a DataFrame, one row per match.

    Args:
        matches: Matches to flatten

    Returns:
        DataFrame with MATCH_FRAME_COLUMNS
    """
    rows = []
    for m in matches:
        rows.append({
            "match_id": m.id,
            "user_id": m.user_id,
            "matched_user_id": m.matched_user_id,
            "matched_user_name": m.matched_user.profile.name,
            "type": m.type.value,
            "score": float(m.score),
            "commonality_count": len(m.commonalities),
            "categories": ";".join(sorted({c.category.value for c in m.commonalities})),
            "top_commonality": m.commonalities[0].description if m.commonalities else "",
            "conversation_starters": " | ".join(m.conversation_starters),
            "viewed": m.viewed,
            "passed": m.passed,
            "generated_at": m.generated_at.isoformat(),
        })
    return pd.DataFrame(rows, columns=MATCH_FRAME_COLUMNS)
