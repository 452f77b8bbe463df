"""
Questionnaire module.

Typed questionnaire records plus the catalog describing how each field is
compared and weighted.
"""

from .schema import (
    QuestionnaireData,
    CommonalityCategory,
    CATEGORY_ORDER,
    FieldKind,
    QuestionSection,
)
from .catalog import (
    QuestionField,
    FIELD_CATALOG,
    FIELDS_BY_NAME,
    REQUIRED_FIELDS,
    RANK_SCALE,
    build_catalog,
    compute_completion,
    format_value,
)

__all__ = [
    "QuestionnaireData",
    "CommonalityCategory",
    "CATEGORY_ORDER",
    "FieldKind",
    "QuestionSection",
    "QuestionField",
    "FIELD_CATALOG",
    "FIELDS_BY_NAME",
    "REQUIRED_FIELDS",
    "RANK_SCALE",
    "build_catalog",
    "compute_completion",
    "format_value",
]
