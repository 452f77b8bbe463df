"""
Attendee snapshot loading.

A snapshot is a YAML (or JSON) document describing attendees, their
questionnaire answers, blocks and connections:

    attendees:
      - id: alice
        profile: {name: Alice, title: CTO, company: Acme}
        questionnaire: {industry: technology, hobbies: [...]}
    blocks:
      - {blocker: alice, blocked: mallory}
    connections:
      - {requester: alice, recipient: bob, status: accepted}

No matching is done here. The loader only builds an InMemoryProfileSource.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Tuple

import yaml

from ..models import Connection, ConnectionStatus, UserProfile
from ..questionnaire.schema import QuestionnaireData
from ..store.sources import InMemoryProfileSource

logger = logging.getLogger(__name__)


def load_snapshot(filepath: str) -> Dict[str, Any]:
    """
    Read a raw snapshot document.

    Args:
        filepath: Path to a .yaml, .yml or .json file

    Returns:
        Parsed document

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document is empty or has no attendees list
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Attendee snapshot not found: {filepath}")

    logger.info(f"Loading attendee snapshot from {filepath}")
    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            document = json.load(f)
        else:
            document = yaml.safe_load(f)

    if not document:
        raise ValueError(f"Attendee snapshot is empty: {filepath}")
    if not isinstance(document.get("attendees"), list):
        raise ValueError(f"Attendee snapshot has no 'attendees' list: {filepath}")

    return document


def parse_snapshot(document: Dict[str, Any]) -> InMemoryProfileSource:
    """
    Build a profile source from a parsed snapshot.

    Attendees without a questionnaire are kept; they simply never match.

    Raises:
        ValueError: On duplicate ids, unknown questionnaire keys or bad statuses
    """
    profiles: Dict[str, UserProfile] = {}
    questionnaires: Dict[str, QuestionnaireData] = {}

    for entry in document["attendees"]:
        user_id = str(entry["id"])
        if user_id in profiles:
            raise ValueError(f"Duplicate attendee id: {user_id}")
        profiles[user_id] = UserProfile.from_dict(entry.get("profile") or {"name": user_id})
        answers = entry.get("questionnaire")
        if answers:
            questionnaires[user_id] = QuestionnaireData.from_dict(answers)

    blocks = [_parse_block(b) for b in document.get("blocks") or []]
    connections = [_parse_connection(c) for c in document.get("connections") or []]

    unknown = {uid for pair in blocks for uid in pair} - set(profiles)
    if unknown:
        logger.warning(f"Blocks reference unknown attendees: {sorted(unknown)}")

    logger.info(
        f"Loaded {len(profiles)} attendees ({len(questionnaires)} with questionnaires), "
        f"{len(blocks)} blocks, {len(connections)} connections"
    )
    return InMemoryProfileSource(profiles, questionnaires, blocks, connections)


def load_attendees(filepath: str) -> InMemoryProfileSource:
    """Load a snapshot file into an InMemoryProfileSource."""
    return parse_snapshot(load_snapshot(filepath))


def _parse_block(entry: Any) -> Tuple[str, str]:
    if isinstance(entry, dict):
        return str(entry["blocker"]), str(entry["blocked"])
    blocker, blocked = entry
    return str(blocker), str(blocked)


def _parse_connection(entry: Dict[str, Any]) -> Connection:
    status = entry.get("status", ConnectionStatus.PENDING.value)
    try:
        status = ConnectionStatus(status)
    except ValueError:
        valid: List[str] = [s.value for s in ConnectionStatus]
        raise ValueError(f"Invalid connection status {status!r}, expected one of {valid}")
    return Connection(str(entry["requester"]), str(entry["recipient"]), status)
