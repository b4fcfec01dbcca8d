from __future__ import annotations

import hashlib
import json
import os
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent
BACKUPS_DIR = BASE_DIR / "backups"


def resolve_event_log(explicit: Optional[str] = None) -> Optional[Path]:
    """
    Resolve the event log path (in order):
      1. --log argument.
      2. EVENT_LOG_PATH env var, the same variable the service writes to.
    The service keeps events in memory only when EVENT_LOG_PATH is unset, so
    there is no default file.
    """
    value = explicit or os.getenv("EVENT_LOG_PATH")
    if value:
        return Path(value).expanduser()
    return None


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def read_events(path: Path) -> Tuple[List[dict], Optional[str]]:
    """Parse the log; the second item names the first unreadable line, if any."""
    events: List[dict] = []
    with path.open("r", encoding="utf-8") as handle:
        for number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as exc:
                return events, f"line {number}: unreadable event ({exc.msg})"
            if not isinstance(event, dict):
                return events, f"line {number}: event is not an object"
            events.append(event)
    return events, None


def event_counts(events: List[dict]) -> Dict[str, int]:
    return dict(Counter(e.get("event", "unknown") for e in events))


def replay_check(events: List[dict]) -> Tuple[bool, str]:
    """Replay the log and check the vote invariants per election."""
    voters: Dict[int, Set[str]] = {}
    ended: Set[int] = set()
    for index, event in enumerate(events):
        kind = event.get("event")
        election_id = event.get("election_id")
        if kind == "VoteCasted":
            if election_id in ended:
                return False, f"line {index + 1}: vote after election {election_id} ended"
            seen = voters.setdefault(election_id, set())
            if event["voter_id"] in seen:
                return False, f"line {index + 1}: duplicate voter in election {election_id}"
            seen.add(event["voter_id"])
        elif kind == "ElectionEnded":
            counted = len(voters.get(election_id, ()))
            if event["total_votes"] != counted:
                return False, (
                    f"line {index + 1}: election {election_id} reports "
                    f"{event['total_votes']} votes, log has {counted}"
                )
            ended.add(election_id)
    return True, "ok"


def now_ts() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


@dataclass
class SnapshotMeta:
    timestamp: str
    event_log: str
    snapshot_file: str
    snapshot_size: int
    sha256: str
    integrity_check: str
    event_counts: Dict[str, int]

    def to_json(self) -> str:
        return json.dumps(self.__dict__, indent=2)
