"""Commonality extraction between two questionnaire records."""

from .extractor import extract_commonalities, normalize_answers, check_weight

__all__ = [
    "extract_commonalities",
    "normalize_answers",
    "check_weight",
]
