"""The election registry: single writer for every election it owns.

Every command and query runs under one re-entrant lock, so operations are
applied strictly one at a time in submission order. A command either raises
an :class:`~election_engine.errors.ElectionError` before touching state, or
completes (including a chained auto-end) and publishes its events.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from election_engine.domain.calculator import compute_stats, compute_winner
from election_engine.domain.election import Election
from election_engine.domain.events import (
    CandidateAdded,
    DomainEvent,
    ElectionCreated,
    ElectionEnded,
    ElectionStatusChanged,
    EventLog,
    VoteCasted,
)
from election_engine.domain.store import ElectionStore, InMemoryElectionStore
from election_engine.errors import (
    AlreadyVoted,
    ElectionError,
    Forbidden,
    InvalidInput,
    InvalidState,
    NotFound,
)
from election_engine.models import (
    CandidateInfo,
    CandidateList,
    ContractInfo,
    ElectionInfo,
    ElectionStats,
    VoteRecordInfo,
    WinnerResult,
)
from election_engine.security.logger import election_logger as logger


class ElectionRegistry:
    def __init__(
        self,
        owner_id: str,
        store: Optional[ElectionStore] = None,
        events: Optional[EventLog] = None,
        vote_grace_seconds: int = 0,
    ) -> None:
        if not owner_id:
            raise InvalidInput("registry owner is required")
        self.owner_id = owner_id
        self._store = store if store is not None else InMemoryElectionStore()
        self._events = events if events is not None else EventLog()
        self._vote_grace_seconds = max(0, vote_grace_seconds)
        self._lock = threading.RLock()

    @property
    def event_log(self) -> EventLog:
        return self._events

    # ---------------- Access control ----------------
    def is_authorized(self, caller_id: str, election: Election) -> bool:
        """Owner of the registry or creator of the election."""
        return caller_id == self.owner_id or caller_id == election.creator_id

    def _authorize(self, caller_id: str, election: Election) -> None:
        if not self.is_authorized(caller_id, election):
            raise Forbidden(f"{caller_id} may not manage election {election.id}")

    def _require(self, election_id: int) -> Election:
        election = self._store.get(election_id)
        if election is None:
            raise NotFound(f"election {election_id} not found")
        return election

    @contextmanager
    def _command(self, action: str, caller_id: str) -> Iterator[List[DomainEvent]]:
        with self._lock:
            pending: List[DomainEvent] = []
            try:
                yield pending
            except ElectionError as exc:
                logger.warning(f"Rejected {action} by {caller_id}: {exc.code} ({exc.message})")
                raise
            self._events.publish(pending)
            logger.info(f"{action} by {caller_id}: " + ", ".join(e.name for e in pending))

    # ---------------- State transition ----------------
    def _end(self, election: Election, now: int, pending: List[DomainEvent]) -> None:
        # Shared by end_election and the post-vote auto-end; not authorized here.
        election.close()
        self._store.deactivate(election.id)
        pending.append(
            ElectionEnded(election_id=election.id, total_votes=election.total_votes, end_time=now)
        )
        pending.append(ElectionStatusChanged(election_id=election.id, is_active=False))

    # ---------------- Commands ----------------
    def create_election(
        self,
        title: str,
        description: str,
        duration_seconds: int,
        caller_id: str,
        now: int,
    ) -> int:
        with self._command("create_election", caller_id) as pending:
            if not title:
                raise InvalidInput("title must not be empty")
            if duration_seconds <= 0:
                raise InvalidInput("duration must be positive")

            election = Election(
                id=self._store.next_id(),
                title=title,
                description=description,
                start_time=now,
                end_time=now + duration_seconds,
                creator_id=caller_id,
            )
            self._store.add(election)
            pending.append(
                ElectionCreated(
                    election_id=election.id,
                    title=title,
                    creator_id=caller_id,
                    start_time=election.start_time,
                    end_time=election.end_time,
                )
            )
            return election.id

    def add_candidate(self, election_id: int, name: str, description: str, caller_id: str) -> int:
        with self._command("add_candidate", caller_id) as pending:
            election = self._require(election_id)
            self._authorize(caller_id, election)
            if not name:
                raise InvalidInput("candidate name must not be empty")
            if not election.is_active:
                raise InvalidState(f"election {election_id} is not active")

            candidate = election.add_candidate(name, description)
            pending.append(
                CandidateAdded(
                    election_id=election_id,
                    candidate_id=candidate.id,
                    candidate_name=name,
                    added_by=caller_id,
                )
            )
            return candidate.id

    def vote(self, election_id: int, candidate_id: int, caller_id: str, now: int) -> None:
        with self._command("vote", caller_id) as pending:
            election = self._require(election_id)
            if not election.is_active:
                raise InvalidState(f"election {election_id} is not active")
            if now < election.start_time:
                raise InvalidState(f"election {election_id} has not started")
            if now > election.end_time + self._vote_grace_seconds:
                raise InvalidState(f"voting window for election {election_id} is closed")
            if caller_id in election.has_voted:
                raise AlreadyVoted(f"{caller_id} already voted in election {election_id}")
            if election.candidate_count == 0:
                raise InvalidInput(f"election {election_id} has no candidates")
            if not election.has_candidate(candidate_id):
                raise InvalidInput(f"candidate {candidate_id} not in election {election_id}")

            election.record_vote(caller_id, candidate_id, now)
            pending.append(
                VoteCasted(
                    election_id=election_id,
                    candidate_id=candidate_id,
                    voter_id=caller_id,
                    timestamp=now,
                )
            )

            # Auto-end: only reachable when a grace period lets a late vote through.
            if now > election.end_time and election.is_active:
                self._end(election, now, pending)

    def end_election(self, election_id: int, caller_id: str, now: int) -> None:
        with self._command("end_election", caller_id) as pending:
            election = self._require(election_id)
            self._authorize(caller_id, election)
            self._end(election, now, pending)

    # ---------------- Queries ----------------
    def get_election_info(self, election_id: int) -> ElectionInfo:
        with self._lock:
            election = self._require(election_id)
            return ElectionInfo(
                id=election.id,
                title=election.title,
                description=election.description,
                start_time=election.start_time,
                end_time=election.end_time,
                is_active=election.is_active,
                creator_id=election.creator_id,
                total_votes=election.total_votes,
                candidate_count=election.candidate_count,
            )

    def get_candidates(self, election_id: int) -> CandidateList:
        with self._lock:
            candidates = self._require(election_id).ordered_candidates()
            return CandidateList(
                ids=[c.id for c in candidates],
                names=[c.name for c in candidates],
                descriptions=[c.description for c in candidates],
                vote_counts=[c.vote_count for c in candidates],
            )

    def get_candidate(self, election_id: int, candidate_id: int) -> CandidateInfo:
        with self._lock:
            election = self._require(election_id)
            if not election.has_candidate(candidate_id):
                raise NotFound(f"candidate {candidate_id} not in election {election_id}")
            candidate = election.candidates[candidate_id]
            return CandidateInfo(
                id=candidate.id,
                name=candidate.name,
                description=candidate.description,
                vote_count=candidate.vote_count,
            )

    def get_votes(self, election_id: int) -> List[VoteRecordInfo]:
        with self._lock:
            election = self._require(election_id)
            return [
                VoteRecordInfo(voter_id=v.voter_id, candidate_id=v.candidate_id, timestamp=v.timestamp)
                for v in election.votes
            ]

    def has_user_voted(self, election_id: int, voter_id: str) -> bool:
        with self._lock:
            return voter_id in self._require(election_id).has_voted

    def get_active_elections(self) -> List[int]:
        """Ids of active elections, in no particular order."""
        with self._lock:
            return self._store.active_ids()

    def get_all_elections(self) -> List[int]:
        with self._lock:
            return self._store.all_ids()

    def get_winner(self, election_id: int) -> WinnerResult:
        with self._lock:
            return compute_winner(self._require(election_id).ordered_candidates())

    def get_election_stats(self, election_id: int, now: int) -> ElectionStats:
        with self._lock:
            election = self._require(election_id)
            return compute_stats(
                election.is_active,
                election.end_time,
                election.total_votes,
                election.candidate_count,
                now,
            )

    def get_contract_info(self) -> ContractInfo:
        with self._lock:
            return ContractInfo(
                owner_id=self.owner_id,
                total_elections=len(self._store.all_ids()),
                active_elections=len(self._store.active_ids()),
            )

    def get_events(self) -> List[DomainEvent]:
        with self._lock:
            return self._events.events()


__all__ = ["ElectionRegistry"]
