from typing import List

from fastapi import APIRouter, Depends, Request

from election_engine.core.settings import get_settings
from election_engine.domain.events import EventLog
from election_engine.domain.registry import ElectionRegistry
from election_engine.models import (
    AddCandidateRequest,
    AddCandidateResponse,
    CandidateInfo,
    CandidateList,
    ContractInfo,
    CreateElectionRequest,
    CreateElectionResponse,
    ElectionInfo,
    ElectionStats,
    HasVotedResponse,
    VoteRecordInfo,
    VoteRequest,
    VoteResponse,
    WinnerResult,
)
from election_engine.security import get_caller, get_clock, limiter

router = APIRouter(prefix="/elections", tags=["elections"])


def build_registry() -> ElectionRegistry:
    settings = get_settings()
    return ElectionRegistry(
        owner_id=settings.registry_owner_id,
        events=EventLog(settings.event_log_path),
        vote_grace_seconds=settings.vote_grace_seconds,
    )


# One registry per process, alive for the process lifetime.
REGISTRY = build_registry()


def get_registry() -> ElectionRegistry:
    return REGISTRY


@router.post("", response_model=CreateElectionResponse, status_code=201)
def create_election(
    payload: CreateElectionRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_clock),
    registry: ElectionRegistry = Depends(get_registry),
):
    election_id = registry.create_election(
        payload.title, payload.description, payload.duration_seconds, caller, now
    )
    return CreateElectionResponse(election_id=election_id)

@router.get("", response_model=List[int])
def list_elections(registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_all_elections()

@router.get("/active", response_model=List[int])
def list_active_elections(registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_active_elections()

@router.get("/info", response_model=ContractInfo)
def contract_info(registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_contract_info()

@router.get("/{election_id}", response_model=ElectionInfo)
def election_info(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_election_info(election_id)

@router.post("/{election_id}/candidates", response_model=AddCandidateResponse, status_code=201)
def add_candidate(
    election_id: int,
    payload: AddCandidateRequest,
    caller: str = Depends(get_caller),
    registry: ElectionRegistry = Depends(get_registry),
):
    candidate_id = registry.add_candidate(election_id, payload.name, payload.description, caller)
    return AddCandidateResponse(election_id=election_id, candidate_id=candidate_id)

@router.get("/{election_id}/candidates", response_model=CandidateList)
def list_candidates(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_candidates(election_id)

@router.get("/{election_id}/candidates/{candidate_id}", response_model=CandidateInfo)
def get_candidate(
    election_id: int,
    candidate_id: int,
    registry: ElectionRegistry = Depends(get_registry),
):
    return registry.get_candidate(election_id, candidate_id)

@router.post("/{election_id}/vote", response_model=VoteResponse)
@limiter.limit(get_settings().vote_rate_limit)
def cast_vote(
    request: Request,
    election_id: int,
    payload: VoteRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_clock),
    registry: ElectionRegistry = Depends(get_registry),
):
    registry.vote(election_id, payload.candidate_id, caller, now)
    return VoteResponse(election_id=election_id, candidate_id=payload.candidate_id, voter_id=caller)

@router.get("/{election_id}/voted/{voter_id}", response_model=HasVotedResponse)
def vote_status(election_id: int, voter_id: str, registry: ElectionRegistry = Depends(get_registry)):
    has_voted = registry.has_user_voted(election_id, voter_id)
    return HasVotedResponse(election_id=election_id, voter_id=voter_id, has_voted=has_voted)

@router.post("/{election_id}/end", status_code=204)
def end_election(
    election_id: int,
    caller: str = Depends(get_caller),
    now: int = Depends(get_clock),
    registry: ElectionRegistry = Depends(get_registry),
):
    registry.end_election(election_id, caller, now)

@router.get("/{election_id}/winner", response_model=WinnerResult)
def winner(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_winner(election_id)

@router.get("/{election_id}/stats", response_model=ElectionStats)
def stats(
    election_id: int,
    now: int = Depends(get_clock),
    registry: ElectionRegistry = Depends(get_registry),
):
    return registry.get_election_stats(election_id, now)

@router.get("/{election_id}/votes", response_model=List[VoteRecordInfo])
def audit_trail(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_votes(election_id)
