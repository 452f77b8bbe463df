"""
Exception hierarchy for the matching engine.

Per-pair problems (InsufficientDataError for candidates, ComputationError)
are caught by the match assembler and the pair is skipped. NotFoundError and
UnknownUserError are surfaced to the caller unchanged.
"""


class MatchingError(Exception):
    """Base class for all engine errors."""


class InsufficientDataError(MatchingError):
    """Questionnaire is missing or below the completion threshold."""

    def __init__(self, user_id: str, completion: int = 0, threshold: int = 0):
        self.user_id = user_id
        self.completion = completion
        self.threshold = threshold
        super().__init__(
            f"Questionnaire for user {user_id} is {completion}% complete "
            f"(requires {threshold}%)"
        )


class NotFoundError(MatchingError):
    """A referenced match does not exist or belongs to another user."""


class UnknownUserError(NotFoundError):
    """The requesting user id has no profile."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Unknown user: {user_id}")


class ComputationError(MatchingError):
    """Malformed input encountered while scoring a single pair."""


class ConcurrentUpdateError(MatchingError):
    """A compare-and-swap write kept losing to concurrent writers."""
