"""Conversation starter generation."""

from .generator import generate_starters, render_starter, StarterConfig

__all__ = ["generate_starters", "render_starter", "StarterConfig"]
