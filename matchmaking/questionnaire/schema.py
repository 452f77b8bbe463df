"""
Input schema for leadership questionnaire responses.

Defines the typed record that holds one attendee's answers. Every question
is an explicitly optional attribute so the extractor can walk the fields
exhaustively instead of probing a loosely-typed bag.

Questionnaire Composition (21 fields):
- Professional (4): industry, years of experience, leadership level, org size
- Goals (4): priorities, challenges, growth areas, networking goals
- Interests (7): recharge, custom interests, content, fitness, weekend,
  volunteer causes, energizers
- Values (6): philosophy, decision style, failure approach, relationship
  values (ranked top-3), communication style, leadership season
"""

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Dict, Any, List


class CommonalityCategory(Enum):
    """Output taxonomy for commonalities (coarser than the input sections)."""
    PROFESSIONAL = "professional"
    VALUES = "values"
    LIFESTYLE = "lifestyle"
    HOBBY = "hobby"


# Tie-break order when two commonalities carry the same weight
CATEGORY_ORDER = [
    CommonalityCategory.PROFESSIONAL,
    CommonalityCategory.VALUES,
    CommonalityCategory.LIFESTYLE,
    CommonalityCategory.HOBBY,
]


class QuestionSection(Enum):
    """Input sections of the questionnaire."""
    PROFESSIONAL = "professional"
    GOALS = "goals"
    INTERESTS = "interests"
    VALUES = "values"


class FieldKind(Enum):
    """How a field is compared between two users."""
    SCALAR = "scalar"
    SET = "set"
    RANKED = "ranked"


MAX_RANKED_VALUES = 3

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    """Convert a camelCase question id to its attribute name."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel_case(name: str) -> str:
    """Convert an attribute name to its camelCase question id."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass
class QuestionnaireData:
    """
    Complete questionnaire answers for one person.

    Scalar answers are strings; multi-select answers are lists of strings.
    ``relationship_values`` is ordered: index 0 is the top pick.
    ``None``, empty strings and empty lists all mean "unanswered".
    """
    # Professional context
    industry: Optional[str] = None
    years_experience: Optional[str] = None
    leadership_level: Optional[str] = None
    organization_size: Optional[str] = None

    # Goals
    leadership_priorities: Optional[List[str]] = None
    leadership_challenges: Optional[List[str]] = None
    growth_areas: Optional[List[str]] = None
    networking_goals: Optional[List[str]] = None

    # Interests
    recharge_activities: Optional[List[str]] = None
    custom_interests: Optional[List[str]] = None
    content_preferences: Optional[List[str]] = None
    fitness_activities: Optional[List[str]] = None
    ideal_weekend: Optional[str] = None
    volunteer_causes: Optional[List[str]] = None
    energizers: Optional[List[str]] = None

    # Values / leadership style
    leadership_philosophy: Optional[List[str]] = None
    decision_making_style: Optional[str] = None
    failure_approach: Optional[str] = None
    relationship_values: Optional[List[str]] = None
    communication_style: Optional[str] = None
    leadership_season: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate answer types and coerce tuples to lists.

        Raises:
            ValueError: If an answer has the wrong type or too many ranked picks
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if "List" in str(f.type):
                if isinstance(value, (tuple, set)):
                    value = list(value)
                    setattr(self, f.name, value)
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ValueError(f"{f.name} must be a list of strings, got {value!r}")
            elif not isinstance(value, str):
                raise ValueError(f"{f.name} must be a string, got {type(value)}")

        if self.relationship_values and len(self.relationship_values) > MAX_RANKED_VALUES:
            raise ValueError(
                f"relationship_values holds at most {MAX_RANKED_VALUES} ranked picks, "
                f"got {len(self.relationship_values)}"
            )

    def get(self, question_id: str) -> Any:
        """Return the raw answer for a camelCase question id."""
        return getattr(self, to_snake_case(question_id))

    def is_answered(self, question_id: str) -> bool:
        """Whether the question has a non-empty answer."""
        value = self.get(question_id)
        if value is None:
            return False
        if isinstance(value, list):
            return any(v.strip() for v in value)
        return value.strip() != ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with camelCase keys, omitting unanswered fields."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[to_camel_case(f.name)] = list(value) if isinstance(value, list) else value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionnaireData":
        """Create from a dictionary keyed by camelCase or snake_case question ids."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            attr = to_snake_case(key)
            if attr not in known:
                raise ValueError(f"Unknown questionnaire field: {key}")
            kwargs[attr] = value
        return cls(**kwargs)
