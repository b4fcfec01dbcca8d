from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from election_engine.errors import InvalidState


@dataclass
class Candidate:
    id: int
    name: str
    description: str
    vote_count: int = 0
    present: bool = True


@dataclass(frozen=True)
class VoteRecord:
    voter_id: str
    candidate_id: int
    timestamp: int


@dataclass
class Election:
    """Per-election aggregate.

    Callers validate before mutating: ``add_candidate`` and ``record_vote``
    assume every precondition has already been checked, so a rejected command
    never leaves a half-applied change behind.
    """

    id: int
    title: str
    description: str
    start_time: int
    end_time: int
    creator_id: str
    is_active: bool = True
    total_votes: int = 0
    candidate_ids: List[int] = field(default_factory=list)
    candidates: Dict[int, Candidate] = field(default_factory=dict)
    has_voted: Set[str] = field(default_factory=set)
    votes: List[VoteRecord] = field(default_factory=list)

    @property
    def candidate_count(self) -> int:
        return len(self.candidate_ids)

    def has_candidate(self, candidate_id: int) -> bool:
        candidate = self.candidates.get(candidate_id)
        return candidate is not None and candidate.present

    def ordered_candidates(self) -> List[Candidate]:
        return [self.candidates[cid] for cid in self.candidate_ids]

    def add_candidate(self, name: str, description: str) -> Candidate:
        candidate = Candidate(
            id=len(self.candidate_ids) + 1,
            name=name,
            description=description,
        )
        self.candidates[candidate.id] = candidate
        self.candidate_ids.append(candidate.id)
        return candidate

    def record_vote(self, voter_id: str, candidate_id: int, now: int) -> VoteRecord:
        record = VoteRecord(voter_id=voter_id, candidate_id=candidate_id, timestamp=now)
        self.has_voted.add(voter_id)
        self.candidates[candidate_id].vote_count += 1
        self.total_votes += 1
        self.votes.append(record)
        return record

    def close(self) -> None:
        # Terminal: an inactive election never reopens.
        if not self.is_active:
            raise InvalidState(f"election {self.id} already ended")
        self.is_active = False


__all__ = ["Candidate", "VoteRecord", "Election"]
