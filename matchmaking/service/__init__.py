"""Matching engine facade."""

from .engine import MatchingEngine

__all__ = ["MatchingEngine"]
