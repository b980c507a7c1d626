from __future__ import annotations
from datetime import datetime
from typing import Iterable, NamedTuple, Protocol
from uuid import UUID
from app.services.clock import as_utc
from app.services.tally import Tally


class RankableResponse(Protocol):
    id: UUID
    submitted_at: datetime


class RankedResponse(NamedTuple):
    response_id: UUID
    total_votes: int
    total_points: int
    final_rank: int


def ranking_key(response: RankableResponse, tally: Tally) -> tuple:
    # points desc, votes desc, earliest submission, then id so the order is total
    return (-tally.total_points, -tally.total_votes, as_utc(response.submitted_at), str(response.id))


def rank_responses(responses: Iterable[RankableResponse], tallies: dict[UUID, Tally]) -> list[RankedResponse]:
    """
    Order a prompt's responses and hand out ranks 1..N.

    Ranks are sequential: the tie-break chain leaves no ties, so no numbers
    are shared or skipped. Responses missing from `tallies` rank as zero.
    """
    rows = [(r, tallies.get(r.id, Tally())) for r in responses]
    rows.sort(key=lambda rt: ranking_key(rt[0], rt[1]))
    return [
        RankedResponse(r.id, t.total_votes, t.total_points, idx)
        for idx, (r, t) in enumerate(rows, start=1)
    ]
