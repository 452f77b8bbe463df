"""
Questionnaire field catalog.

Declares, for every question, the input section it belongs to, how it is
compared (scalar / set / ranked), which commonality category it produces,
its importance constant and its description template.

Catalog order is the discovery order used to break ties between
equally-weighted commonalities, so fields are declared section by section.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Any, List, Optional, Tuple

from .schema import (
    CommonalityCategory,
    FieldKind,
    QuestionSection,
    QuestionnaireData,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionField:
    """
    Definition of one questionnaire field.

    Attributes:
        name: camelCase question id
        section: Input section of the questionnaire
        kind: Comparison rule applied by the extractor
        category: Commonality category emitted for shared answers
        importance: Base weight in (0, 1]
        template: Description template with a ``{value}`` placeholder
        required: Whether the field counts toward completion
    """
    name: str
    section: QuestionSection
    kind: FieldKind
    category: CommonalityCategory
    importance: float
    template: str
    required: bool = True


_P = CommonalityCategory.PROFESSIONAL
_V = CommonalityCategory.VALUES
_L = CommonalityCategory.LIFESTYLE
_H = CommonalityCategory.HOBBY

FIELD_CATALOG: Tuple[QuestionField, ...] = (
    # Professional context
    QuestionField("industry", QuestionSection.PROFESSIONAL, FieldKind.SCALAR, _P, 0.90,
                  "Both work in {value}"),
    QuestionField("yearsExperience", QuestionSection.PROFESSIONAL, FieldKind.SCALAR, _P, 0.60,
                  "Similar leadership experience ({value} years)"),
    QuestionField("leadershipLevel", QuestionSection.PROFESSIONAL, FieldKind.SCALAR, _P, 0.85,
                  "Both at {value} level"),
    QuestionField("organizationSize", QuestionSection.PROFESSIONAL, FieldKind.SCALAR, _P, 0.50,
                  "Both lead in {value} organizations"),

    # Goals
    QuestionField("leadershipPriorities", QuestionSection.GOALS, FieldKind.SET, _P, 0.90,
                  "Shared priority: {value}"),
    QuestionField("leadershipChallenges", QuestionSection.GOALS, FieldKind.SET, _P, 0.95,
                  "Both navigating {value} challenges"),
    QuestionField("growthAreas", QuestionSection.GOALS, FieldKind.SET, _P, 0.85,
                  "Both developing {value} skills"),
    QuestionField("networkingGoals", QuestionSection.GOALS, FieldKind.SET, _P, 0.80,
                  "Aligned networking goal: {value}"),

    # Interests
    QuestionField("rechargeActivities", QuestionSection.INTERESTS, FieldKind.SET, _H, 0.55,
                  "Both enjoy {value}"),
    QuestionField("customInterests", QuestionSection.INTERESTS, FieldKind.SET, _H, 0.60,
                  "Both enjoy {value}", required=False),
    QuestionField("contentPreferences", QuestionSection.INTERESTS, FieldKind.SET, _H, 0.50,
                  "Shared interest in {value} content"),
    QuestionField("fitnessActivities", QuestionSection.INTERESTS, FieldKind.SET, _H, 0.50,
                  "Both active in {value}", required=False),
    QuestionField("idealWeekend", QuestionSection.INTERESTS, FieldKind.SCALAR, _L, 0.55,
                  "Similar weekend preferences: {value}"),
    QuestionField("volunteerCauses", QuestionSection.INTERESTS, FieldKind.SET, _V, 0.70,
                  "Both passionate about {value}", required=False),
    QuestionField("energizers", QuestionSection.INTERESTS, FieldKind.SET, _L, 0.75,
                  "Energized by {value}"),

    # Values / leadership style
    QuestionField("leadershipPhilosophy", QuestionSection.VALUES, FieldKind.SET, _V, 0.90,
                  "Share {value} leadership style"),
    QuestionField("decisionMakingStyle", QuestionSection.VALUES, FieldKind.SCALAR, _V, 0.70,
                  "Both {value} decision makers"),
    QuestionField("failureApproach", QuestionSection.VALUES, FieldKind.SCALAR, _V, 0.65,
                  "Similar approach to setbacks: {value}"),
    QuestionField("relationshipValues", QuestionSection.VALUES, FieldKind.RANKED, _V, 0.85,
                  "Both value {value} in relationships"),
    QuestionField("communicationStyle", QuestionSection.VALUES, FieldKind.SCALAR, _V, 0.60,
                  "Both prefer {value} communication"),
    QuestionField("leadershipSeason", QuestionSection.VALUES, FieldKind.SCALAR, _P, 0.50,
                  "Both in {value} mode", required=False),
)

FIELDS_BY_NAME: Dict[str, QuestionField] = {f.name: f for f in FIELD_CATALOG}

REQUIRED_FIELDS: List[str] = [f.name for f in FIELD_CATALOG if f.required]

# Ranked picks are scaled by RANK_SCALE / (rank_a + rank_b). At 2.0 a mutual top
# pick keeps its full set weight; 1.0 halves it. Must lie in (0, 2] so weights
# stay inside (0, 1].
RANK_SCALE = 2.0

# Predefined recharge options (value -> label). Custom interests equal to one
# of these are folded into rechargeActivities before comparison.
RECHARGE_OPTIONS: Dict[str, str] = {
    "reading": "Reading (business or pleasure)",
    "fitness": "Fitness & Sports",
    "gaming": "Gaming",
    "cooking": "Cooking & Culinary adventures",
    "travel": "Travel & Exploration",
    "music": "Music (listening or playing)",
    "creative": "Creative pursuits",
    "volunteering": "Volunteering & Community service",
    "outdoors": "Outdoor Adventures",
    "movies": "Movies & Entertainment",
    "meditation": "Meditation & Mindfulness",
    "learning": "Continuous learning",
}


def format_value(value: str) -> str:
    """Human label for a raw answer value: hyphens to spaces, words capitalized."""
    words = value.strip().replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def normalize_answer(value: str) -> str:
    """Comparison key for a raw answer: trimmed and case-folded."""
    return value.strip().casefold()


def match_recharge_option(custom: str) -> Optional[str]:
    """
    Resolve a custom interest to a predefined recharge option.

    Args:
        custom: Free-text interest typed by the user

    Returns:
        The option value if the text equals an option value or label
        (case-insensitively), otherwise None
    """
    key = normalize_answer(custom)
    for value, label in RECHARGE_OPTIONS.items():
        if key == value or key == label.casefold():
            return value
    return None


def compute_completion(questionnaire: Optional[QuestionnaireData]) -> int:
    """
    Percentage of required fields answered, rounded to an integer.

    Args:
        questionnaire: Answers for one user (None counts as 0%)

    Returns:
        Completion percentage in [0, 100]
    """
    if questionnaire is None:
        return 0
    answered = [name for name in REQUIRED_FIELDS if questionnaire.is_answered(name)]
    return int(round(len(answered) / len(REQUIRED_FIELDS) * 100))


def build_catalog(importance_overrides: Optional[Dict[str, float]] = None) -> Tuple[QuestionField, ...]:
    """
    Return the field catalog with importance overrides applied.

    Args:
        importance_overrides: Mapping of camelCase field name to importance

    Returns:
        Catalog tuple in declaration order

    Raises:
        ValueError: If an override names an unknown field or is outside (0, 1]
    """
    if not importance_overrides:
        return FIELD_CATALOG

    for name, importance in importance_overrides.items():
        if name not in FIELDS_BY_NAME:
            raise ValueError(f"Unknown questionnaire field in overrides: {name}")
        if not 0 < importance <= 1:
            raise ValueError(f"Importance for {name} must be in (0, 1], got {importance}")

    logger.info(f"Applying importance overrides for {sorted(importance_overrides)}")
    return tuple(
        replace(f, importance=float(importance_overrides[f.name]))
        if f.name in importance_overrides else f
        for f in FIELD_CATALOG
    )


def catalog_to_dict(catalog: Tuple[QuestionField, ...] = FIELD_CATALOG) -> Dict[str, Dict[str, Any]]:
    """Serializable view of the catalog, keyed by field name."""
    return {
        f.name: {
            "section": f.section.value,
            "kind": f.kind.value,
            "category": f.category.value,
            "importance": f.importance,
            "required": f.required,
        }
        for f in catalog
    }
