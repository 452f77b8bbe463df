"""Storage and profile collaborators."""

from .repository import Repository, InMemoryRepository, MatchRepository
from .sources import ProfileSource, InMemoryProfileSource

__all__ = [
    "Repository",
    "InMemoryRepository",
    "MatchRepository",
    "ProfileSource",
    "InMemoryProfileSource",
]
