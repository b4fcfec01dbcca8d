from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from election_engine.domain.events import EventLog
from election_engine.domain.registry import ElectionRegistry

HERE = Path(__file__).parent
ROOT = HERE.parent
SCRIPTS = ROOT / "scripts"
BACKUPS = ROOT / "backups"


def _clean_backups_dir() -> None:
    if not BACKUPS.exists():
        return
    for artefact in BACKUPS.glob("events-*"):
        artefact.unlink()


def _run(log_path: Path, monkeypatch) -> int:
    monkeypatch.setenv("EVENT_LOG_PATH", str(log_path))
    return subprocess.call([sys.executable, str(SCRIPTS / "audit_snapshot.py")])


def test_snapshot_of_consistent_log(tmp_path: Path, monkeypatch) -> None:
    log_path = tmp_path / "events.jsonl"
    registry = ElectionRegistry(owner_id="owner", events=EventLog(log_path))
    election_id = registry.create_election("Board Vote", "", 3600, "creator", 1000)
    registry.add_candidate(election_id, "Alice", "", "creator")
    registry.add_candidate(election_id, "Bob", "", "creator")
    registry.vote(election_id, 1, "v1", 1100)
    registry.vote(election_id, 2, "v2", 1200)
    registry.end_election(election_id, "owner", 1300)

    BACKUPS.mkdir(parents=True, exist_ok=True)
    _clean_backups_dir()
    assert _run(log_path, monkeypatch) == 0

    snapshots = sorted(BACKUPS.glob("events-*.jsonl"))
    metadata_files = sorted(BACKUPS.glob("events-*.json"))
    assert len(snapshots) == 1
    assert len(metadata_files) == 1

    meta = json.loads(metadata_files[0].read_text(encoding="utf-8"))
    assert meta["integrity_check"] == "ok"
    assert meta["event_counts"] == {
        "ElectionCreated": 1,
        "CandidateAdded": 2,
        "VoteCasted": 2,
        "ElectionEnded": 1,
        "ElectionStatusChanged": 1,
    }
    assert snapshots[0].read_bytes() == log_path.read_bytes()
    _clean_backups_dir()


def test_snapshot_flags_duplicate_voter(tmp_path: Path, monkeypatch) -> None:
    log_path = tmp_path / "events.jsonl"
    vote = {"event": "VoteCasted", "election_id": 1, "candidate_id": 1, "voter_id": "v1", "timestamp": 1100}
    log_path.write_text(json.dumps(vote) + "\n" + json.dumps(vote) + "\n", encoding="utf-8")

    _clean_backups_dir()
    assert _run(log_path, monkeypatch) == 1

    meta = json.loads(sorted(BACKUPS.glob("events-*.json"))[0].read_text(encoding="utf-8"))
    assert "duplicate voter" in meta["integrity_check"]
    _clean_backups_dir()


def test_missing_log(tmp_path: Path, monkeypatch) -> None:
    assert _run(tmp_path / "absent.jsonl", monkeypatch) == 2


def test_snapshot_flags_corrupt_line(tmp_path: Path, monkeypatch) -> None:
    log_path = tmp_path / "events.jsonl"
    created = {"event": "ElectionCreated", "election_id": 1, "title": "T", "creator_id": "c",
               "start_time": 1000, "end_time": 1100}
    log_path.write_text(json.dumps(created) + "\n" + '{"event": "VoteCas\n', encoding="utf-8")

    _clean_backups_dir()
    assert _run(log_path, monkeypatch) == 1

    meta = json.loads(sorted(BACKUPS.glob("events-*.json"))[0].read_text(encoding="utf-8"))
    assert meta["integrity_check"].startswith("line 2: unreadable event")
    assert meta["event_counts"] == {"ElectionCreated": 1}
    _clean_backups_dir()


def test_unconfigured_log(monkeypatch) -> None:
    monkeypatch.delenv("EVENT_LOG_PATH", raising=False)
    assert subprocess.call([sys.executable, str(SCRIPTS / "audit_snapshot.py")]) == 2


def test_log_argument_overrides_env(tmp_path: Path, monkeypatch) -> None:
    log_path = tmp_path / "events.jsonl"
    registry = ElectionRegistry(owner_id="owner", events=EventLog(log_path))
    registry.create_election("Board Vote", "", 3600, "creator", 1000)

    monkeypatch.setenv("EVENT_LOG_PATH", str(tmp_path / "absent.jsonl"))
    _clean_backups_dir()
    code = subprocess.call([sys.executable, str(SCRIPTS / "audit_snapshot.py"), "--log", str(log_path)])
    assert code == 0
    _clean_backups_dir()
