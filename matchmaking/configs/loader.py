"""
Configuration loading and validation.

This module handles loading of the YAML engine configuration and
validates the scoring, questionnaire and network sections.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

CLUSTERING_STRATEGIES = ("majority_category", "connected_components")


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    required_sections = ["global", "questionnaire", "scoring", "starters",
                         "matching", "network"]

    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    if "questionnaire" in config:
        threshold = config["questionnaire"].get("completion_threshold", 80)
        if not 0 <= threshold <= 100:
            issues.append(f"Completion threshold must be in [0, 100], got {threshold}")

    if "scoring" in config:
        scoring = config["scoring"]
        k = scoring.get("k", 0.7)
        high = scoring.get("high_affinity_threshold", 0.6)
        strategic = scoring.get("strategic_threshold", 0.35)
        if k <= 0:
            issues.append(f"Scoring k must be positive, got {k}")
        if not 0 <= strategic <= high <= 1:
            issues.append(
                f"Thresholds must satisfy 0 <= strategic <= high_affinity <= 1: "
                f"{strategic}, {high}"
            )

    # Field importance overrides must stay inside the weight domain
    importances = get_config_value(config, "commonality.field_importance", {}) or {}
    for field_name, value in importances.items():
        if not 0 < value <= 1:
            issues.append(f"Importance for {field_name} must be in (0, 1], got {value}")

    rank_scale = get_config_value(config, "commonality.rank_scale", 2.0)
    if not 0 < rank_scale <= 2:
        issues.append(f"Rank scale must be in (0, 2], got {rank_scale}")

    if "starters" in config:
        limit = config["starters"].get("limit", 2)
        if limit < 0:
            issues.append(f"Starter limit must be non-negative, got {limit}")

    if "matching" in config:
        matching = config["matching"]
        for name in ("max_high_affinity", "max_strategic", "refresh_window_days"):
            value = matching.get(name)
            if value is not None and value < 0:
                issues.append(f"matching.{name} must be non-negative, got {value}")
        limit = matching.get("diversity_limit")
        if limit is not None and limit < 1:
            issues.append(f"matching.diversity_limit must be positive, got {limit}")
        if matching.get("backfill") and (
            matching.get("max_high_affinity") is None or matching.get("max_strategic") is None
        ):
            issues.append("matching.backfill requires both max_high_affinity and max_strategic")

    if "network" in config:
        strategy = config["network"].get("clustering", "majority_category")
        if strategy not in CLUSTERING_STRATEGIES:
            issues.append(f"Unknown clustering strategy: {strategy}")

    if "global" in config:
        if "log_level" not in config["global"]:
            issues.append("Missing global.log_level")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "scoring.high_affinity_threshold")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
