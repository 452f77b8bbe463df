"""
Attendee snapshot loading and the batch runner.
"""

import json
from pathlib import Path

import pytest
import yaml

from matchmaking.data_loading import load_attendees, load_snapshot, parse_snapshot
from matchmaking.models import ConnectionStatus
from matchmaking.run import run_batch

ROOT = Path(__file__).resolve().parent.parent
SAMPLE = ROOT / "data" / "sample_attendees.yaml"
CONFIG = ROOT / "configs" / "config.yaml"


class TestSnapshot:

    def test_sample_snapshot(self):
        source = load_attendees(str(SAMPLE))
        assert set(source.profiles) == {"alice", "bob", "carol", "dan", "erin", "frank"}
        assert source.get_questionnaire("alice").industry == "technology"
        assert source.get_profile("alice").company == "Brightpath"
        assert ("erin", "frank") in source.blocks

    def test_json_snapshot(self, tmp_path):
        path = tmp_path / "attendees.json"
        path.write_text(json.dumps({"attendees": [{"id": "a", "profile": {"name": "A"}}]}))
        source = load_attendees(str(path))
        assert source.get_profile("a").name == "A"
        assert source.get_questionnaire("a") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(str(tmp_path / "missing.yaml"))

    def test_no_attendees(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"people": []}))
        with pytest.raises(ValueError, match="attendees"):
            load_snapshot(str(path))

    def test_duplicate_ids(self):
        with pytest.raises(ValueError, match="Duplicate"):
            parse_snapshot({"attendees": [{"id": "a"}, {"id": "a"}]})

    def test_blocks_as_pairs(self):
        source = parse_snapshot({"attendees": [{"id": "a"}, {"id": "b"}], "blocks": [["a", "b"]]})
        assert source.list_candidates("b") == []

    def test_connection_status(self):
        source = parse_snapshot({
            "attendees": [{"id": "a"}, {"id": "b"}],
            "connections": [{"requester": "a", "recipient": "b", "status": "accepted"}],
        })
        assert source.connections[0].status == ConnectionStatus.ACCEPTED
        assert source.list_accepted_connections("b") == ["a"]

    def test_bad_connection_status(self):
        with pytest.raises(ValueError, match="Invalid connection status"):
            parse_snapshot({
                "attendees": [{"id": "a"}],
                "connections": [{"requester": "a", "recipient": "b", "status": "maybe"}],
            })


class TestRunBatch:

    def test_writes_artifacts(self, tmp_path):
        result = run_batch(str(CONFIG), str(SAMPLE), output_dir=str(tmp_path))
        assert result["success"]
        for name in ("matches.json", "network.json", "insights.json", "metrics.json", "matches.csv"):
            assert (tmp_path / name).exists()

        assert "dan" in result["skipped_users"]
        matches = json.loads((tmp_path / "matches.json").read_text())
        alice_peers = {m["matchedUserId"] for m in matches["alice"]}
        assert "bob" in alice_peers
        assert "dan" not in alice_peers
        assert all(m["matchedUserId"] != "frank" for m in matches["erin"])

    def test_single_user(self, tmp_path):
        result = run_batch(str(CONFIG), str(SAMPLE), user_id="alice", output_dir=str(tmp_path))
        assert result["matched_users"] == ["alice"]
        network = json.loads((tmp_path / "network.json").read_text())
        assert network["alice"]["nodes"][0]["id"] == "alice"
