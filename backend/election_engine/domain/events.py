"""Domain events emitted by every successful command.

Events are frozen and appended to an :class:`EventLog` in emission order. The
log is the audit trail consumed by external subscribers; when a path is
configured each event is also appended to a JSON-lines file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Union

from election_engine.security.logger import election_logger as logger


@dataclass(frozen=True)
class DomainEvent:
    name: ClassVar[str] = "DomainEvent"

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class ElectionCreated(DomainEvent):
    name: ClassVar[str] = "ElectionCreated"

    election_id: int
    title: str
    creator_id: str
    start_time: int
    end_time: int


@dataclass(frozen=True)
class CandidateAdded(DomainEvent):
    name: ClassVar[str] = "CandidateAdded"

    election_id: int
    candidate_id: int
    candidate_name: str
    added_by: str


@dataclass(frozen=True)
class VoteCasted(DomainEvent):
    name: ClassVar[str] = "VoteCasted"

    election_id: int
    candidate_id: int
    voter_id: str
    timestamp: int


@dataclass(frozen=True)
class ElectionEnded(DomainEvent):
    name: ClassVar[str] = "ElectionEnded"

    election_id: int
    total_votes: int
    end_time: int


@dataclass(frozen=True)
class ElectionStatusChanged(DomainEvent):
    name: ClassVar[str] = "ElectionStatusChanged"

    election_id: int
    is_active: bool


Subscriber = Callable[[DomainEvent], None]


class EventLog:
    """Append-only event log with synchronous subscribers."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._events: List[DomainEvent] = []
        self._subscribers: List[Subscriber] = []
        self._path = Path(path) if path else None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def append(self, event: DomainEvent) -> None:
        self.publish([event])

    def publish(self, events: Sequence[DomainEvent]) -> None:
        """Append a command's events together, then notify subscribers.

        The command is already committed when this runs, so neither a failed
        file write nor a failing subscriber raises; both are logged.
        """
        self._events.extend(events)
        if self._path is not None and events:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(
                        "".join(json.dumps(e.to_dict(), sort_keys=True) + "\n" for e in events)
                    )
            except OSError:
                names = ", ".join(e.name for e in events)
                logger.exception(f"Could not write {names} to {self._path}")
        for event in events:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    logger.exception(f"Subscriber {callback!r} failed on {event.name}")

    def events(self) -> List[DomainEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


__all__ = [
    "DomainEvent",
    "ElectionCreated",
    "CandidateAdded",
    "VoteCasted",
    "ElectionEnded",
    "ElectionStatusChanged",
    "EventLog",
]
