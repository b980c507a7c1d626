from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Protocol
from uuid import UUID


class VoteRecord(Protocol):
    voter_id: UUID
    response_id: UUID
    points: int
    is_self_vote: bool


@dataclass(frozen=True)
class Tally:
    total_votes: int = 0
    total_points: int = 0


def tally_votes(votes: Iterable[VoteRecord], response_ids: Iterable[UUID]) -> dict[UUID, Tally]:
    """
    Per-response vote count and point sum for one prompt.

    Every response in `response_ids` gets an entry, zero-vote ones included.
    Self-votes never count. Votes pointing at responses outside the set are
    ignored so a stale row cannot surface a phantom entry.
    """
    counts: dict[UUID, list[int]] = {rid: [0, 0] for rid in response_ids}
    for v in votes:
        if v.is_self_vote:
            continue
        bucket = counts.get(v.response_id)
        if bucket is None:
            continue
        bucket[0] += 1
        bucket[1] += int(v.points)
    return {rid: Tally(total_votes=c[0], total_points=c[1]) for rid, c in counts.items()}


def round_voters(votes: Iterable[VoteRecord]) -> set[UUID]:
    """Users who cast at least one ordinary vote in the round."""
    return {v.voter_id for v in votes if not v.is_self_vote}


def voted_in_round(votes: Iterable[VoteRecord], user_id: UUID) -> bool:
    # Drives the must-vote-to-earn-points rule in league standings
    return user_id in round_voters(votes)
