"""
Matching engine facade.

Wires the profile source, match assembler, match repository and graph
builder together behind the operations the platform calls:
1. generate_matches: score the user against their candidate pool and persist
2. get_matches / mark_viewed / mark_passed: owner access to stored records
3. build_graph / network_insights: visualization projections

The engine holds no per-user state of its own; everything shared lives in
the repository and is written with compare-and-swap.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Any, Iterable, List, Optional, Set, Tuple

from ..errors import UnknownUserError
from ..matching import Candidate, MatchAssembler
from ..models import Match, UserProfile, utcnow
from ..network import (
    NetworkConfig,
    NetworkGraphBuilder,
    NetworkGraphData,
    NetworkInsights,
    compute_insights,
)
from ..store import MatchRepository, ProfileSource

logger = logging.getLogger(__name__)


class MatchingEngine:
    """
    Entry point for match generation and retrieval.

    Attributes:
        source: Read-only profile/questionnaire collaborator
        store: Match repository (in-memory by default)
        assembler: MatchAssembler performing extraction, scoring and starters
        graph_builder: NetworkGraphBuilder for the network projection
    """

    def __init__(
        self,
        source: ProfileSource,
        store: Optional[MatchRepository] = None,
        assembler: Optional[MatchAssembler] = None,
        network_config: Optional[NetworkConfig] = None
    ):
        self.source = source
        self.store = store or MatchRepository()
        self.assembler = assembler or MatchAssembler()
        self.graph_builder = NetworkGraphBuilder(network_config)

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        source: ProfileSource,
        store: Optional[MatchRepository] = None
    ) -> "MatchingEngine":
        """Create an engine from the main config dictionary."""
        return cls(
            source=source,
            store=store,
            assembler=MatchAssembler.from_config(config),
            network_config=NetworkConfig.from_config(config),
        )

    def generate_matches(self, user_id: str, generated_at: Optional[datetime] = None) -> List[Match]:
        """
        Generate and persist matches for a user.

        The run replaces the user's match set: regenerated pairs keep the
        owner's flags, and peers no longer produced (blocked, declined, now
        incomplete or below threshold) are superseded. With a refresh window
        configured, peers matched inside the window and not passed are left
        out of scoring and their records kept as they are.

        Args:
            user_id: Requesting user
            generated_at: Timestamp for the run (defaults to now)

        Returns:
            The newly generated matches, sorted by score descending

        Raises:
            UnknownUserError: If the user has no profile
            InsufficientDataError: If the user's questionnaire is incomplete
        """
        self._require_profile(user_id)
        questionnaire = self.source.get_questionnaire(user_id)
        self.assembler.ensure_eligible(user_id, questionnaire)
        generated_at = generated_at or utcnow()

        candidates = self._candidates(user_id)
        recent = self._recently_matched(user_id, generated_at, {c.id for c in candidates})
        matches = self.assembler.generate_matches(
            user_id, questionnaire, candidates, generated_at, exclude=recent
        )
        return self.store.replace_pairs(user_id, matches, keep_peers=recent)

    def get_matches(self, user_id: str, include_passed: bool = False) -> List[Match]:
        """Stored matches owned by the user, best first, limited to current candidates."""
        matches = self._visible_matches(user_id)
        if not include_passed:
            matches = [m for m in matches if not m.passed]
        return matches

    def mark_viewed(self, user_id: str, match_id: str) -> Match:
        """
        Mark a match as viewed by its owner.

        Raises:
            NotFoundError: If the match does not exist or is not owned by user_id
        """
        match = self.store.update_match(user_id, match_id, lambda m: m.with_flags(viewed=True))
        logger.debug(f"{user_id} viewed match {match_id}")
        return match

    def mark_passed(self, user_id: str, match_id: str) -> Match:
        """
        Mark a match as passed by its owner.

        Raises:
            NotFoundError: If the match does not exist or is not owned by user_id
        """
        match = self.store.update_match(user_id, match_id, lambda m: m.with_flags(passed=True))
        logger.debug(f"{user_id} passed on match {match_id}")
        return match

    def build_graph(
        self,
        user_id: str,
        peer_links: Iterable[Tuple[str, str]] = ()
    ) -> NetworkGraphData:
        """
        Build the network graph from the user's stored matches.

        Raises:
            UnknownUserError: If the user has no profile
        """
        owner = self._require_profile(user_id)
        available = set(self.source.list_candidates(user_id))
        connections = [
            peer_id for peer_id in self.source.list_accepted_connections(user_id)
            if peer_id in available
        ]

        profiles: Dict[str, UserProfile] = {user_id: owner}
        for peer_id in connections:
            profile = self.source.get_profile(peer_id)
            if profile is not None:
                profiles[peer_id] = profile

        return self.graph_builder.build(
            user_id, self._visible_matches(user_id, available), connections, profiles, peer_links
        )

    def network_insights(self, user_id: str) -> NetworkInsights:
        """Headline statistics for the user's network graph."""
        return compute_insights(self.build_graph(user_id))

    def _require_profile(self, user_id: str) -> UserProfile:
        profile = self.source.get_profile(user_id)
        if profile is None:
            raise UnknownUserError(user_id)
        return profile

    def _candidates(self, user_id: str) -> List[Candidate]:
        candidates = []
        for peer_id in self.source.list_candidates(user_id):
            profile = self.source.get_profile(peer_id)
            if profile is None:
                logger.debug(f"Candidate {peer_id} has no profile, skipping")
                continue
            candidates.append(Candidate(peer_id, profile, self.source.get_questionnaire(peer_id)))
        return candidates

    def _visible_matches(self, user_id: str, available: Optional[Set[str]] = None) -> List[Match]:
        # Blocks or declines recorded since the last run hide the peer until it is superseded
        if available is None:
            available = set(self.source.list_candidates(user_id))
        return [m for m in self.store.list(user_id) if m.matched_user_id in available]

    def _recently_matched(self, user_id: str, now: datetime, candidate_ids: Set[str]) -> Set[str]:
        window = self.assembler.config.refresh_window_days
        if window is None:
            return set()
        cutoff = now - timedelta(days=window)
        recent = {
            m.matched_user_id for m in self.store.list(user_id)
            if not m.passed and m.generated_at > cutoff and m.matched_user_id in candidate_ids
        }
        if recent:
            logger.debug(f"Refresh for {user_id} keeps {len(recent)} recent matches")
        return recent
