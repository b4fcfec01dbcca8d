from pydantic import BaseModel
from typing import List

# ---- Snapshots returned by read operations ----

class ElectionInfo(BaseModel):
    id: int
    title: str
    description: str
    start_time: int
    end_time: int
    is_active: bool
    creator_id: str
    total_votes: int
    candidate_count: int

class CandidateInfo(BaseModel):
    id: int
    name: str
    description: str
    vote_count: int

class CandidateList(BaseModel):
    # parallel arrays, index i describes one candidate
    ids: List[int]
    names: List[str]
    descriptions: List[str]
    vote_counts: List[int]

class VoteRecordInfo(BaseModel):
    voter_id: str
    candidate_id: int
    timestamp: int

class WinnerResult(BaseModel):
    candidate_id: int
    name: str
    vote_count: int
    is_tied: bool

class ElectionStats(BaseModel):
    total_votes: int
    candidate_count: int
    remaining: int
    ended: bool

class ContractInfo(BaseModel):
    owner_id: str
    total_elections: int
    active_elections: int

# ---- Request / response payloads ----

class CreateElectionRequest(BaseModel):
    title: str
    description: str = ""
    duration_seconds: int

class CreateElectionResponse(BaseModel):
    election_id: int

class AddCandidateRequest(BaseModel):
    name: str
    description: str = ""

class AddCandidateResponse(BaseModel):
    election_id: int
    candidate_id: int

class VoteRequest(BaseModel):
    candidate_id: int

class VoteResponse(BaseModel):
    election_id: int
    candidate_id: int
    voter_id: str

class HasVotedResponse(BaseModel):
    election_id: int
    voter_id: str
    has_voted: bool
