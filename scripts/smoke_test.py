"""
Smoke test for the matching engine over the sample snapshot.

This script validates that:
1. The config and sample attendees load
2. Every eligible attendee gets matches without errors
3. Match records satisfy their basic invariants
4. Graphs build with non-overlapping clusters

Usage:
    python scripts/smoke_test.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_smoke_test():
    """Run the engine end to end and check invariants."""

    logger.info("=" * 60)
    logger.info("SMOKE TEST: Matching Engine")
    logger.info("=" * 60)

    from matchmaking.configs import load_config, validate_config
    from matchmaking.data_loading import load_attendees
    from matchmaking.errors import InsufficientDataError
    from matchmaking.service import MatchingEngine

    config_path = project_root / "configs" / "config.yaml"
    logger.info(f"Loading config from {config_path}")
    config = load_config(str(config_path))
    for issue in validate_config(config):
        logger.warning(f"Config issue: {issue}")

    source = load_attendees(str(project_root / "data" / "sample_attendees.yaml"))
    engine = MatchingEngine.from_config(config, source)

    results = {}
    for user_id in sorted(source.profiles):
        try:
            matches = engine.generate_matches(user_id)
        except InsufficientDataError as e:
            results[user_id] = f"SKIPPED ({e.completion}% complete)"
            continue

        try:
            for m in matches:
                assert 0.0 <= m.score <= 1.0, f"score out of range: {m.score}"
                assert m.commonalities, "match without commonalities"
                assert all(0 < c.weight <= 1 for c in m.commonalities), "weight out of range"
                assert m.user_id == user_id and m.matched_user_id != user_id

            graph = engine.build_graph(user_id)
            members = [n for c in graph.clusters for n in c.node_ids]
            assert len(members) == len(set(members)), "node in more than one cluster"

            insights = engine.network_insights(user_id)
            results[user_id] = (f"OK ({len(matches)} matches, "
                                f"avg strength {insights.average_strength}%)")
        except AssertionError as e:
            results[user_id] = f"FAILED: {e}"

    # =========================================================================
    # Summary
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("SMOKE TEST SUMMARY")
    logger.info("=" * 60)

    all_passed = True
    for user_id, status in results.items():
        logger.info(f"  {user_id}: {status}")
        if status.startswith("FAILED"):
            all_passed = False

    if all_passed:
        logger.info("\n  ALL CHECKS PASSED")
        return 0
    else:
        logger.error("\n  SOME CHECKS FAILED")
        return 1


if __name__ == "__main__":
    sys.exit(run_smoke_test())
