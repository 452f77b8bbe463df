"""Match assembly from questionnaire pairs."""

from .assembler import MatchAssembler, MatchingConfig, Candidate

__all__ = ["MatchAssembler", "MatchingConfig", "Candidate"]
