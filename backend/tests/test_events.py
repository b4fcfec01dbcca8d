import json
import logging

import pytest

from election_engine.domain.events import (
    CandidateAdded,
    ElectionCreated,
    ElectionEnded,
    ElectionStatusChanged,
    EventLog,
    VoteCasted,
)
from election_engine.domain.registry import ElectionRegistry
from election_engine.errors import Forbidden, NotFound


def test_commands_emit_events_in_order():
    registry = ElectionRegistry(owner_id="owner")
    election_id = registry.create_election("Board Vote", "", 3600, "creator", 1000)
    registry.add_candidate(election_id, "Alice", "", "owner")
    registry.vote(election_id, 1, "v1", 1100)
    registry.end_election(election_id, "creator", 1200)

    assert registry.get_events() == [
        ElectionCreated(election_id=1, title="Board Vote", creator_id="creator", start_time=1000, end_time=4600),
        CandidateAdded(election_id=1, candidate_id=1, candidate_name="Alice", added_by="owner"),
        VoteCasted(election_id=1, candidate_id=1, voter_id="v1", timestamp=1100),
        ElectionEnded(election_id=1, total_votes=1, end_time=1200),
        ElectionStatusChanged(election_id=1, is_active=False),
    ]


def test_failed_command_emits_nothing():
    registry = ElectionRegistry(owner_id="owner")
    registry.create_election("Board Vote", "", 3600, "creator", 1000)
    before = len(registry.event_log)
    with pytest.raises(Forbidden):
        registry.add_candidate(1, "Mallory", "", "stranger")
    assert len(registry.event_log) == before


def test_event_log_writes_json_lines(tmp_path):
    path = tmp_path / "var" / "events.jsonl"
    registry = ElectionRegistry(owner_id="owner", events=EventLog(path))
    registry.create_election("Board Vote", "", 3600, "creator", 1000)
    registry.add_candidate(1, "Alice", "", "creator")

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["event"] for line in lines] == ["ElectionCreated", "CandidateAdded"]
    assert lines[1] == {
        "event": "CandidateAdded",
        "election_id": 1,
        "candidate_id": 1,
        "candidate_name": "Alice",
        "added_by": "creator",
    }


def test_subscribers_receive_events():
    log = EventLog()
    seen = []
    log.subscribe(seen.append)
    registry = ElectionRegistry(owner_id="owner", events=log)
    registry.create_election("Board Vote", "", 3600, "creator", 1000)

    log.unsubscribe(seen.append)
    registry.create_election("Second", "", 3600, "creator", 1000)
    assert [e.election_id for e in seen] == [1]


def test_failing_subscriber_is_logged_and_command_commits(caplog):
    def broken(event):
        raise RuntimeError("consumer down")

    log = EventLog()
    log.subscribe(broken)
    registry = ElectionRegistry(owner_id="owner", events=log)

    with caplog.at_level(logging.ERROR, logger="election"):
        election_id = registry.create_election("Board Vote", "", 3600, "creator", 1000)

    assert registry.get_all_elections() == [election_id]
    assert len(log) == 1
    assert any("ElectionCreated" in record.getMessage() for record in caplog.records)


def test_rejections_are_logged(caplog):
    registry = ElectionRegistry(owner_id="owner")
    with caplog.at_level(logging.WARNING, logger="election"):
        with pytest.raises(NotFound):
            registry.end_election(7, "owner", 1000)
    assert any("not_found" in record.getMessage() for record in caplog.records)


def test_unwritable_event_log_keeps_command_committed(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    registry = ElectionRegistry(
        owner_id="owner",
        events=EventLog(blocker / "events.jsonl"),
        vote_grace_seconds=60,
    )

    with caplog.at_level(logging.ERROR, logger="election"):
        election_id = registry.create_election("T", "", 100, "c", 1000)
        registry.add_candidate(election_id, "Alice", "", "c")
        registry.vote(election_id, 1, "v1", 1150)

    assert registry.get_all_elections() == [election_id]
    assert registry.get_election_info(election_id).is_active is False
    assert [e.name for e in registry.get_events()] == [
        "ElectionCreated",
        "CandidateAdded",
        "VoteCasted",
        "ElectionEnded",
        "ElectionStatusChanged",
    ]
    messages = [record.getMessage() for record in caplog.records]
    assert any("Could not write VoteCasted, ElectionEnded, ElectionStatusChanged" in m for m in messages)


def test_auto_end_writes_all_events_of_the_vote(tmp_path):
    path = tmp_path / "events.jsonl"
    registry = ElectionRegistry(owner_id="owner", events=EventLog(path), vote_grace_seconds=60)
    election_id = registry.create_election("T", "", 100, "c", 1000)
    registry.add_candidate(election_id, "Alice", "", "c")
    registry.vote(election_id, 1, "v1", 1150)

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["event"] for line in lines][-3:] == [
        "VoteCasted",
        "ElectionEnded",
        "ElectionStatusChanged",
    ]
