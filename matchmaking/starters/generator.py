"""
Conversation starter generation.

Turns a pair's top commonalities into short prompts. Selection keeps at most
one commonality per category to spread the topics, and each pick is rendered
through a fixed category template. No randomness: the same commonalities
always produce the same strings.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Sequence

from ..models import Commonality
from ..questionnaire.catalog import format_value
from ..questionnaire.schema import CommonalityCategory

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 2

TEMPLATES = {
    CommonalityCategory.VALUES: "How does {topic} show up in the way you lead?",
    CommonalityCategory.LIFESTYLE: "What does {topic} look like for you these days?",
    CommonalityCategory.HOBBY: "I noticed we both enjoy {topic}!",
}

INDUSTRY_TEMPLATE = "What's the biggest shift you're seeing in {industry} right now?"
PROFESSIONAL_IN_INDUSTRY_TEMPLATE = "What's your take on {topic} in {industry}?"
PROFESSIONAL_TEMPLATE = "What's your take on {topic}?"


@dataclass
class StarterConfig:
    """Configuration for conversation starters."""
    limit: int = DEFAULT_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "StarterConfig":
        return cls(limit=config.get("starters", {}).get("limit", DEFAULT_LIMIT))


def generate_starters(
    commonalities: Sequence[Commonality],
    limit: int = DEFAULT_LIMIT
) -> List[str]:
    """
    Render conversation starters for a pair.

    Commonalities are expected in ranked order (as returned by the
    extractor); the first commonality of each category is used.

    Args:
        commonalities: Ranked commonalities for the pair
        limit: Maximum number of starters

    Returns:
        Up to ``limit`` starter strings
    """
    if limit <= 0:
        return []

    industry = _shared_industry(commonalities)
    starters = []
    seen = set()
    for commonality in commonalities:
        if commonality.category in seen:
            continue
        seen.add(commonality.category)
        starters.append(render_starter(commonality, industry))
        if len(starters) >= limit:
            break
    return starters


def render_starter(commonality: Commonality, industry: Optional[str] = None) -> str:
    """
    Render one commonality through its category template.

    Args:
        commonality: Commonality to render
        industry: Display name of the pair's shared industry, if any

    Returns:
        Starter text
    """
    topic = _topic(commonality)
    if commonality.category == CommonalityCategory.PROFESSIONAL:
        if commonality.field == "industry":
            return INDUSTRY_TEMPLATE.format(industry=format_value(commonality.value))
        if industry:
            return PROFESSIONAL_IN_INDUSTRY_TEMPLATE.format(topic=topic, industry=industry)
        return PROFESSIONAL_TEMPLATE.format(topic=topic)
    return TEMPLATES[commonality.category].format(topic=topic)


def _topic(commonality: Commonality) -> str:
    # Commonalities built by hand may lack a value; fall back to the description
    source = commonality.value or commonality.description
    return format_value(source).lower()


def _shared_industry(commonalities: Sequence[Commonality]) -> Optional[str]:
    for commonality in commonalities:
        if commonality.field == "industry" and commonality.value:
            return format_value(commonality.value)
    return None
