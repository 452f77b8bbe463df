"""
Entity shapes exchanged with the surrounding platform.

Commonalities and matches are frozen dataclasses: only the owner-controlled
``viewed``/``passed`` flags ever change, and they change by producing a new
record (``dataclasses.replace``) so stored values can be compared-and-swapped.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from .questionnaire.schema import CommonalityCategory

# Namespace for deterministic match ids derived from (owner, peer)
MATCH_NAMESPACE = uuid.UUID("6f1c3a52-9d84-4c1e-a0b7-3e5d2f9a8c41")


class MatchType(Enum):
    """Match classification."""
    HIGH_AFFINITY = "high-affinity"
    STRATEGIC = "strategic"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def match_id_for(user_id: str, matched_user_id: str) -> str:
    """Stable id for the directional pair (user_id -> matched_user_id)."""
    return str(uuid.uuid5(MATCH_NAMESPACE, f"{user_id}->{matched_user_id}"))


@dataclass(frozen=True)
class Commonality:
    """
    A single shared attribute between two users.

    Attributes:
        category: Commonality category
        description: Human-readable description ("Both work in Technology")
        weight: Contribution to the affinity score, in (0, 1]
        field: camelCase question id the commonality came from
        value: Shared raw answer value
    """
    category: CommonalityCategory
    description: str
    weight: float
    field: str = ""
    value: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "description": self.description,
            "weight": float(self.weight),
            "field": self.field,
            "value": self.value,
        }


@dataclass(frozen=True)
class UserProfile:
    """Public profile fields supplied by the profile collaborator."""
    name: str
    position: str = ""
    title: str = ""
    company: Optional[str] = None
    photo_url: Optional[str] = None
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"name": self.name, "position": self.position, "title": self.title}
        if self.company:
            result["company"] = self.company
        if self.photo_url:
            result["photoUrl"] = self.photo_url
        if self.location:
            result["location"] = self.location
        return result

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "UserProfile":
        return cls(
            name=d["name"],
            position=d.get("position", ""),
            title=d.get("title", ""),
            company=d.get("company"),
            photo_url=d.get("photoUrl", d.get("photo_url")),
            location=d.get("location"),
        )


@dataclass(frozen=True)
class PublicUser:
    """User as shown to other attendees."""
    id: str
    profile: UserProfile
    questionnaire_completed: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "profile": self.profile.to_dict(),
            "questionnaireCompleted": self.questionnaire_completed,
        }


@dataclass(frozen=True)
class Match:
    """
    Directional match record owned by ``user_id`` describing ``matched_user_id``.

    Every field except ``viewed`` and ``passed`` is fixed at generation time.
    """
    id: str
    user_id: str
    matched_user_id: str
    matched_user: PublicUser
    type: MatchType
    commonalities: Tuple[Commonality, ...]
    conversation_starters: Tuple[str, ...]
    score: float
    generated_at: datetime = field(default_factory=utcnow)
    viewed: bool = False
    passed: bool = False

    def with_flags(self, viewed: Optional[bool] = None, passed: Optional[bool] = None) -> "Match":
        """Copy of this match with owner flags updated."""
        return replace(
            self,
            viewed=self.viewed if viewed is None else viewed,
            passed=self.passed if passed is None else passed,
        )

    def content_key(self) -> Tuple:
        """Everything generated for the pair except the timestamp."""
        return (
            self.id, self.user_id, self.matched_user_id, self.matched_user,
            self.type, self.commonalities, self.conversation_starters, self.score,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "matchedUserId": self.matched_user_id,
            "matchedUser": self.matched_user.to_dict(),
            "type": self.type.value,
            "commonalities": [c.to_dict() for c in self.commonalities],
            "conversationStarters": list(self.conversation_starters),
            "score": float(self.score),
            "generatedAt": self.generated_at.isoformat(),
            "viewed": self.viewed,
            "passed": self.passed,
        }


class ConnectionStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass(frozen=True)
class Connection:
    """Connection request between two attendees, owned by the connections collaborator."""
    requester_id: str
    recipient_id: str
    status: ConnectionStatus = ConnectionStatus.PENDING

    def involves(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.recipient_id)

    def peer_of(self, user_id: str) -> str:
        return self.recipient_id if user_id == self.requester_id else self.requester_id
