"""In-memory election engine: elections, candidates, one vote per identity, winners."""

from election_engine.domain.registry import ElectionRegistry
from election_engine.errors import (
    AlreadyVoted,
    ElectionError,
    Forbidden,
    InvalidInput,
    InvalidState,
    NotFound,
)

__all__ = [
    "ElectionRegistry",
    "ElectionError",
    "NotFound",
    "Forbidden",
    "InvalidInput",
    "InvalidState",
    "AlreadyVoted",
]
