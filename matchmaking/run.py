"""
Batch runner for the matching engine.

Generates matches for every attendee in a snapshot (or a single one) and
writes the results as reviewable artifacts.

Usage:
    python -m matchmaking.run --config configs/config.yaml \
        --attendees data/sample_attendees.yaml [--user ID] [--output-dir DIR]

The runner performs the following steps:
1. Load and validate configuration
2. Load the attendee snapshot
3. Generate matches per user
4. Build network graphs and insights
5. Compute match quality metrics
6. Save matches.json, network.json, insights.json, metrics.json and matches.csv
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def run_batch(
    config_path: str,
    attendees_path: str,
    user_id: Optional[str] = None,
    output_dir: Optional[str] = None
) -> Dict[str, Any]:
    """
    Run match generation over an attendee snapshot.

    Args:
        config_path: Path to the configuration YAML file
        attendees_path: Path to the attendee snapshot (YAML or JSON)
        user_id: If provided, generate matches for this user only
        output_dir: If provided, write artifacts here instead of the config default

    Returns:
        Dictionary with run results and paths to artifacts
    """
    from .configs import load_config, validate_config
    from .data_loading import load_attendees
    from .errors import InsufficientDataError
    from .evaluation import calculate_match_quality_metrics, matches_to_frame
    from .questionnaire.catalog import build_catalog, catalog_to_dict
    from .service import MatchingEngine

    # =========================================================================
    # 1. Load and validate configuration
    # =========================================================================
    logger.info("=" * 60)
    logger.info("MATCHING ENGINE - BATCH RUN")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(config.get("global", {}).get("log_level", "INFO"))

    effective_output_dir = Path(output_dir or config.get("global", {}).get("output_dir", "artifacts"))
    effective_output_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # 2. Load attendees
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 1: Loading Attendees")
    logger.info("=" * 60)

    source = load_attendees(attendees_path)
    engine = MatchingEngine.from_config(config, source)

    if user_id is not None:
        user_ids = [user_id]
    else:
        user_ids = sorted(source.profiles)
    logger.info(f"Generating matches for {len(user_ids)} users")

    # =========================================================================
    # 3. Generate matches
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 2: Generating Matches")
    logger.info("=" * 60)

    matched_users: List[str] = []
    skipped_users: Dict[str, str] = {}
    for uid in user_ids:
        try:
            engine.generate_matches(uid)
            matched_users.append(uid)
        except InsufficientDataError as e:
            # A single requested user is an error; in a batch it is just skipped
            if user_id is not None:
                raise
            skipped_users[uid] = str(e)
            logger.info(f"Skipping {uid}: {e}")

    all_matches = [m for uid in matched_users for m in engine.get_matches(uid, include_passed=True)]

    # =========================================================================
    # 4. Network graphs and insights
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 3: Building Networks")
    logger.info("=" * 60)

    networks = {}
    insights = {}
    for uid in matched_users:
        graph = engine.build_graph(uid)
        networks[uid] = graph.to_dict()
        insights[uid] = engine.network_insights(uid).to_dict()
        logger.info(f"  {uid}: {len(graph.nodes)} nodes, {len(graph.clusters)} clusters")

    # =========================================================================
    # 5. Metrics
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 4: Match Quality")
    logger.info("=" * 60)

    metrics = calculate_match_quality_metrics(all_matches)
    logger.info("\n" + metrics.summary())

    # =========================================================================
    # 6. Save artifacts
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 5: Saving Artifacts")
    logger.info("=" * 60)

    overrides = config.get("commonality", {}).get("field_importance") or {}
    paths = {
        "matches": effective_output_dir / "matches.json",
        "network": effective_output_dir / "network.json",
        "insights": effective_output_dir / "insights.json",
        "metrics": effective_output_dir / "metrics.json",
        "report": effective_output_dir / "matches.csv",
    }

    _write_json(paths["matches"], {
        uid: [m.to_dict() for m in engine.get_matches(uid, include_passed=True)]
        for uid in matched_users
    })
    _write_json(paths["network"], networks)
    _write_json(paths["insights"], insights)
    _write_json(paths["metrics"], {
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "attendees": attendees_path,
        "users": len(user_ids),
        "matchedUsers": len(matched_users),
        "skippedUsers": skipped_users,
        "metrics": metrics.to_dict(),
        "config": config,
        "catalog": catalog_to_dict(build_catalog(overrides)),
    })
    matches_to_frame(all_matches).to_csv(paths["report"], index=False)

    for name, path in paths.items():
        logger.info(f"  Saved {name} to {path}")

    logger.info("\n" + "=" * 60)
    logger.info("BATCH RUN COMPLETE")
    logger.info("=" * 60)

    return {
        "success": True,
        "output_dir": str(effective_output_dir),
        "matched_users": matched_users,
        "skipped_users": skipped_users,
        "total_matches": len(all_matches),
        "paths": {name: str(path) for name, path in paths.items()},
    }


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def main():
    """Main entry point for the batch runner."""
    parser = argparse.ArgumentParser(
        description="Generate attendee matches and network graphs from a snapshot"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--attendees",
        type=str,
        default="data/sample_attendees.yaml",
        help="Path to attendee snapshot (YAML or JSON)"
    )
    parser.add_argument(
        "--user",
        type=str,
        default=None,
        help="Generate matches for a single user id"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for artifacts (overrides config)"
    )

    args = parser.parse_args()

    try:
        result = run_batch(args.config, args.attendees, user_id=args.user, output_dir=args.output_dir)
        if result["success"]:
            logger.info(f"\nGenerated {result['total_matches']} matches")
            return 0
        else:
            logger.error("\nBatch run failed!")
            return 1
    except Exception as e:
        logger.exception(f"Batch run failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
