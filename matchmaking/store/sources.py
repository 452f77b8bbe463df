"""
Profile source collaborator.

The engine reads profiles, questionnaires, candidate pools and accepted
connections through this interface and never writes to it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models import Connection, ConnectionStatus, UserProfile
from ..questionnaire.schema import QuestionnaireData

logger = logging.getLogger(__name__)


class ProfileSource(ABC):
    """
    Read-only access to attendee data owned by the surrounding platform.
    """

    @abstractmethod
    def get_questionnaire(self, user_id: str) -> Optional[QuestionnaireData]:
        pass

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        pass

    @abstractmethod
    def list_candidates(self, user_id: str) -> List[str]:
        """Peers eligible to be matched with ``user_id``, already filtered for blocks/reports."""
        pass

    @abstractmethod
    def list_accepted_connections(self, user_id: str) -> List[str]:
        pass


class InMemoryProfileSource(ProfileSource):
    """
    ProfileSource backed by in-memory dictionaries.

    Candidates exclude the user, anyone blocked in either direction, and
    anyone whose connection with the user was declined.
    """

    def __init__(
        self,
        profiles: Dict[str, UserProfile],
        questionnaires: Optional[Dict[str, QuestionnaireData]] = None,
        blocks: Iterable[Tuple[str, str]] = (),
        connections: Iterable[Connection] = ()
    ):
        self.profiles = dict(profiles)
        self.questionnaires = dict(questionnaires or {})
        self.blocks: Set[Tuple[str, str]] = set(blocks)
        self.connections: List[Connection] = list(connections)

    def get_questionnaire(self, user_id: str) -> Optional[QuestionnaireData]:
        return self.questionnaires.get(user_id)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.profiles.get(user_id)

    def list_candidates(self, user_id: str) -> List[str]:
        unavailable = {user_id}
        for blocker, blocked in self.blocks:
            if blocker == user_id:
                unavailable.add(blocked)
            elif blocked == user_id:
                unavailable.add(blocker)
        for connection in self.connections:
            if connection.status == ConnectionStatus.DECLINED and connection.involves(user_id):
                unavailable.add(connection.peer_of(user_id))

        candidates = sorted(uid for uid in self.profiles if uid not in unavailable)
        logger.debug(f"{len(candidates)} candidates for {user_id} "
                     f"({len(unavailable) - 1} unavailable)")
        return candidates

    def list_accepted_connections(self, user_id: str) -> List[str]:
        peers = {
            c.peer_of(user_id) for c in self.connections
            if c.status == ConnectionStatus.ACCEPTED and c.involves(user_id)
        }
        return sorted(peers)
