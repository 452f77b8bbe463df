"""
Match assembly for one user against a candidate pool.

For each eligible candidate the assembler runs commonality extraction,
affinity scoring and starter generation, and keeps the pairs that clear the
strategic threshold.

Key Design Decisions:
- Pairs are independent: a failure on one candidate never aborts the batch
- Candidates below the completion threshold are skipped silently
- Match ids are derived from (owner, peer), so re-running replaces records
- Sub-threshold pairs are dropped, never stored as low-score matches
- A malformed candidate record fails only its own pair

Selection (all opt-in, applied after scoring):
1. Per-type caps, optionally backfilled from the other type
2. Diversity: one pick per (industry, leadership level) before filling by score
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Iterable, List, Optional, Tuple

from ..commonality import extract_commonalities
from ..errors import ComputationError, InsufficientDataError
from ..models import Match, MatchType, PublicUser, UserProfile, match_id_for, utcnow
from ..questionnaire.catalog import (
    FIELD_CATALOG,
    RANK_SCALE,
    QuestionField,
    build_catalog,
    compute_completion,
    normalize_answer,
)
from ..questionnaire.schema import QuestionnaireData
from ..scoring import AffinityScorer, ScoringConfig
from ..starters import StarterConfig, generate_starters

logger = logging.getLogger(__name__)


@dataclass
class MatchingConfig:
    """
    Configuration for match assembly.

    Attributes:
        completion_threshold: Minimum questionnaire completion percentage
        max_high_affinity: Keep at most this many high-affinity matches (None = all)
        max_strategic: Keep at most this many strategic matches (None = all)
        backfill: Fill slots one type leaves empty with the best of the other
            type (needs both caps)
        diversity_limit: Keep at most this many matches, taking one per
            (industry, leadership level) first (None = off)
        refresh_window_days: Skip peers matched within this many days unless
            passed; their records are kept as they are (None = off)
        exclude_user_ids: Users never matched against anyone
    """
    completion_threshold: int = 80
    max_high_affinity: Optional[int] = None
    max_strategic: Optional[int] = None
    backfill: bool = False
    diversity_limit: Optional[int] = None
    refresh_window_days: Optional[int] = None
    exclude_user_ids: List[str] = field(default_factory=list)

    def validate(self) -> None:
        """Validate configuration values."""
        if not 0 <= self.completion_threshold <= 100:
            raise ValueError(
                f"completion_threshold must be in [0, 100], got {self.completion_threshold}"
            )
        for name in ("max_high_affinity", "max_strategic", "refresh_window_days"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.diversity_limit is not None and self.diversity_limit < 1:
            raise ValueError(f"diversity_limit must be positive, got {self.diversity_limit}")
        if self.backfill and (self.max_high_affinity is None or self.max_strategic is None):
            raise ValueError("backfill requires both max_high_affinity and max_strategic")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchingConfig":
        """Create from main config dictionary."""
        matching_config = config.get("matching", {})
        return cls(
            completion_threshold=config.get("questionnaire", {}).get("completion_threshold", 80),
            max_high_affinity=matching_config.get("max_high_affinity"),
            max_strategic=matching_config.get("max_strategic"),
            backfill=bool(matching_config.get("backfill", False)),
            diversity_limit=matching_config.get("diversity_limit"),
            refresh_window_days=matching_config.get("refresh_window_days"),
            exclude_user_ids=list(matching_config.get("exclude_user_ids") or []),
        )


@dataclass(frozen=True)
class Candidate:
    """A peer considered for matching."""
    id: str
    profile: UserProfile
    questionnaire: Optional[QuestionnaireData]


class MatchAssembler:
    """
    Builds Match records for a user from a candidate pool.

    Attributes:
        config: MatchingConfig with eligibility and selection rules
        scorer: AffinityScorer used to score and classify pairs
        starter_limit: Number of conversation starters per match
        catalog: Questionnaire field catalog used for extraction
        rank_scale: Numerator of the ranked-field factor
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        scorer: Optional[AffinityScorer] = None,
        starter_limit: int = StarterConfig().limit,
        catalog: Tuple[QuestionField, ...] = FIELD_CATALOG,
        rank_scale: float = RANK_SCALE
    ):
        self.config = config or MatchingConfig()
        self.config.validate()
        if not 0 < rank_scale <= 2:
            raise ValueError(f"rank_scale must be in (0, 2], got {rank_scale}")
        self.scorer = scorer or AffinityScorer()
        self.starter_limit = starter_limit
        self.catalog = catalog
        self.rank_scale = rank_scale

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchAssembler":
        """Create an assembler from the main config dictionary."""
        commonality = config.get("commonality", {})
        return cls(
            config=MatchingConfig.from_config(config),
            scorer=AffinityScorer(ScoringConfig.from_config(config)),
            starter_limit=StarterConfig.from_config(config).limit,
            catalog=build_catalog(commonality.get("field_importance") or {}),
            rank_scale=commonality.get("rank_scale", RANK_SCALE),
        )

    def ensure_eligible(self, user_id: str, questionnaire: Optional[QuestionnaireData]) -> None:
        """
        Check that a questionnaire clears the completion threshold.

        Raises:
            InsufficientDataError: If the questionnaire is missing or incomplete
        """
        completion = compute_completion(questionnaire)
        if questionnaire is None or completion < self.config.completion_threshold:
            raise InsufficientDataError(user_id, completion, self.config.completion_threshold)

    def generate_matches(
        self,
        user_id: str,
        questionnaire: QuestionnaireData,
        candidates: Iterable[Candidate],
        generated_at: Optional[datetime] = None,
        exclude: Iterable[str] = ()
    ) -> List[Match]:
        """
        Generate matches for a user.

        Args:
            user_id: Owner of the generated matches
            questionnaire: The owner's questionnaire answers
            candidates: Candidate pool (already filtered for blocks/reports)
            generated_at: Timestamp stamped on every match (defaults to now)
            exclude: Extra peer ids to skip for this run only

        Returns:
            Matches sorted by score (desc), then matched user id

        Raises:
            InsufficientDataError: If the owner's questionnaire is incomplete
        """
        self.ensure_eligible(user_id, questionnaire)
        generated_at = generated_at or utcnow()
        excluded = set(self.config.exclude_user_ids) | set(exclude)

        matches = []
        profiles: Dict[str, Tuple[str, str]] = {}
        skipped = 0
        for candidate in candidates:
            if candidate.id == user_id or candidate.id in excluded:
                continue
            try:
                match = self.match_pair(user_id, questionnaire, candidate, generated_at)
            except InsufficientDataError as e:
                logger.debug(f"Skipping candidate: {e}")
                continue
            except ComputationError as e:
                skipped += 1
                logger.warning(f"Failed to score {user_id} -> {candidate.id}: {e}")
                continue
            if match is not None:
                matches.append(match)
                profiles[candidate.id] = _diversity_key(candidate.questionnaire)

        matches.sort(key=lambda m: (-m.score, m.matched_user_id))
        matches = self._apply_caps(matches)
        if self.config.diversity_limit is not None:
            matches = self._diversify(matches, profiles)

        logger.info(f"Generated {len(matches)} matches for {user_id}"
                    + (f" ({skipped} pairs failed)" if skipped else ""))
        return matches

    def match_pair(
        self,
        user_id: str,
        questionnaire: QuestionnaireData,
        candidate: Candidate,
        generated_at: datetime
    ) -> Optional[Match]:
        """
        Score one pair and build its Match.

        Returns:
            Match, or None if the pair is below the strategic threshold

        Raises:
            InsufficientDataError: If the candidate's questionnaire is incomplete
            ComputationError: If the candidate record is malformed or the pair
                produced malformed weights
        """
        if candidate.questionnaire is not None:
            try:
                candidate.questionnaire.validate()
            except ValueError as e:
                raise ComputationError(f"Malformed questionnaire for {candidate.id}: {e}") from e
        self.ensure_eligible(candidate.id, candidate.questionnaire)

        commonalities = extract_commonalities(
            questionnaire, candidate.questionnaire, self.catalog, self.rank_scale
        )
        if not commonalities:
            return None

        result = self.scorer.score(commonalities)
        if not result.is_match:
            return None

        return Match(
            id=match_id_for(user_id, candidate.id),
            user_id=user_id,
            matched_user_id=candidate.id,
            matched_user=PublicUser(id=candidate.id, profile=candidate.profile,
                                    questionnaire_completed=True),
            type=result.type,
            commonalities=tuple(commonalities),
            conversation_starters=tuple(generate_starters(commonalities, self.starter_limit)),
            score=result.score,
            generated_at=generated_at,
        )

    def _apply_caps(self, matches: List[Match]) -> List[Match]:
        caps = {
            MatchType.HIGH_AFFINITY: self.config.max_high_affinity,
            MatchType.STRATEGIC: self.config.max_strategic,
        }
        if all(cap is None for cap in caps.values()):
            return matches

        kept = []
        leftovers = []
        counts = {match_type: 0 for match_type in caps}
        for match in matches:
            cap = caps[match.type]
            if cap is not None and counts[match.type] >= cap:
                leftovers.append(match)
                continue
            counts[match.type] += 1
            kept.append(match)

        if self.config.backfill:
            open_slots = sum(caps.values()) - len(kept)
            if open_slots > 0 and leftovers:
                kept.extend(leftovers[:open_slots])
                kept.sort(key=lambda m: (-m.score, m.matched_user_id))
        return kept

    def _diversify(
        self,
        matches: List[Match],
        profiles: Dict[str, Tuple[str, str]]
    ) -> List[Match]:
        limit = self.config.diversity_limit
        if len(matches) <= limit:
            return matches

        picked = []
        seen = set()
        for match in matches:
            key = profiles.get(match.matched_user_id)
            if key in seen:
                continue
            seen.add(key)
            picked.append(match)
            if len(picked) == limit:
                break

        for match in matches:
            if len(picked) == limit:
                break
            if match not in picked:
                picked.append(match)

        return sorted(picked, key=lambda m: (-m.score, m.matched_user_id))


def _diversity_key(questionnaire: Optional[QuestionnaireData]) -> Tuple[str, str]:
    if questionnaire is None:
        return ("", "")
    return (
        normalize_answer(questionnaire.industry or ""),
        normalize_answer(questionnaire.leadership_level or ""),
    )
