"""Attendee snapshot loading."""

from .loaders import load_snapshot, parse_snapshot, load_attendees

__all__ = ["load_snapshot", "parse_snapshot", "load_attendees"]
