"""
Shared fixtures for the matching engine tests.

``make_answers`` builds a fully answered questionnaire whose values are
unique to ``tag``, so two records never overlap unless a test passes the
same override to both.
"""

import pytest

from matchmaking.models import Connection, ConnectionStatus, UserProfile
from matchmaking.questionnaire.schema import QuestionnaireData
from matchmaking.service import MatchingEngine
from matchmaking.store import InMemoryProfileSource


def make_answers(tag: str, **overrides) -> QuestionnaireData:
    """Complete questionnaire for ``tag``. Override any field via snake_case kwargs."""
    data = {
        "industry": f"industry-{tag}",
        "years_experience": f"years-{tag}",
        "leadership_level": f"level-{tag}",
        "organization_size": f"size-{tag}",
        "leadership_priorities": [f"priority-{tag}"],
        "leadership_challenges": [f"challenge-{tag}"],
        "growth_areas": [f"growth-{tag}"],
        "networking_goals": [f"goal-{tag}"],
        "recharge_activities": [f"recharge-{tag}"],
        "content_preferences": [f"content-{tag}"],
        "ideal_weekend": f"weekend-{tag}",
        "energizers": [f"energizer-{tag}"],
        "leadership_philosophy": [f"philosophy-{tag}"],
        "decision_making_style": f"decision-{tag}",
        "failure_approach": f"failure-{tag}",
        "relationship_values": [f"value-{tag}"],
        "communication_style": f"communication-{tag}",
    }
    data.update(overrides)
    return QuestionnaireData(**data)


def make_profile(name: str, **overrides) -> UserProfile:
    data = {"name": name, "position": "Director", "title": f"{name} Title", "company": "Acme"}
    data.update(overrides)
    return UserProfile(**data)


# Shared by "alice" and "bob": professional + values, well above 0.6
STRONG_OVERLAP = {
    "industry": "technology",
    "leadership_level": "c-suite",
    "leadership_philosophy": ["servant-leadership"],
    "decision_making_style": "data-driven",
}

# Shared by "alice" and "carol": a single scalar professional field, strategic only
MODERATE_OVERLAP = {
    "leadership_challenges": ["scaling"],
}


@pytest.fixture
def answers():
    return make_answers


@pytest.fixture
def source() -> InMemoryProfileSource:
    """
    Four attendees:
    - alice/bob: high-affinity pair
    - alice/carol: strategic pair
    - dave: incomplete questionnaire, never matched
    """
    profiles = {
        "alice": make_profile("Alice"),
        "bob": make_profile("Bob", company="Northwind"),
        "carol": make_profile("Carol", company=None),
        "dave": make_profile("Dave"),
    }
    questionnaires = {
        "alice": make_answers("alice", **STRONG_OVERLAP, **MODERATE_OVERLAP),
        "bob": make_answers("bob", **STRONG_OVERLAP),
        "carol": make_answers("carol", **MODERATE_OVERLAP, leadership_priorities=["innovation"]),
        "dave": QuestionnaireData(industry="technology"),
    }
    connections = [
        Connection("alice", "bob", ConnectionStatus.ACCEPTED),
        Connection("erin", "alice", ConnectionStatus.ACCEPTED),
    ]
    profiles["erin"] = make_profile("Erin")
    return InMemoryProfileSource(profiles, questionnaires, connections=connections)


@pytest.fixture
def engine(source) -> MatchingEngine:
    return MatchingEngine(source)
