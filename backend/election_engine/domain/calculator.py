"""Read-side derivations over an election's accumulated counts.

Both functions are pure: they look only at their arguments and never touch the
registry, so they can be called on snapshots as well as live aggregates.
"""

from __future__ import annotations

from typing import Iterable, Optional

from election_engine.domain.election import Candidate
from election_engine.errors import NotFound
from election_engine.models import ElectionStats, WinnerResult

NO_WINNER = 0


def compute_winner(candidates: Iterable[Candidate]) -> WinnerResult:
    """Return the first candidate to reach the highest vote count.

    ``candidates`` must be in insertion order. A tie never changes which
    candidate is reported; it only sets ``is_tied``.

    :raises NotFound: if no candidate has any votes.
    """
    winning_vote_count = 0
    winning_candidate_id = NO_WINNER
    winner: Optional[Candidate] = None
    tied_count = 0

    for candidate in candidates:
        if candidate.vote_count > winning_vote_count:
            winning_vote_count = candidate.vote_count
            winning_candidate_id = candidate.id
            winner = candidate
            tied_count = 1
        elif candidate.vote_count == winning_vote_count and candidate.vote_count > 0:
            tied_count += 1

    if winning_candidate_id == NO_WINNER or winner is None:
        raise NotFound("no votes registered")

    return WinnerResult(
        candidate_id=winner.id,
        name=winner.name,
        vote_count=winning_vote_count,
        is_tied=tied_count > 1,
    )


def compute_stats(
    is_active: bool,
    end_time: int,
    total_votes: int,
    candidate_count: int,
    now: int,
) -> ElectionStats:
    ended = (not is_active) or now > end_time
    remaining = 0 if ended else max(0, end_time - now)
    return ElectionStats(
        total_votes=total_votes,
        candidate_count=candidate_count,
        remaining=remaining,
        ended=ended,
    )


__all__ = ["NO_WINNER", "compute_winner", "compute_stats"]
