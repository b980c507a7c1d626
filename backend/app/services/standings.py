from __future__ import annotations
from collections import defaultdict
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.prompt import Prompt, COMPLETED
from app.models.response import Response
from app.models.vote import Vote
from app.schemas.league import StandingRow
from app.services.tally import round_voters


async def league_standings(session: AsyncSession, league_id: UUID) -> list[StandingRow]:
    """
    Cross-round standings over the league's COMPLETED prompts.

    A response's points only count toward its author's total for rounds in
    which the author also voted. Wins, podiums and average rank use every
    ranked response regardless. Order: points desc, wins desc, user id.
    """
    prompt_ids = (await session.execute(
        select(Prompt.id).where(Prompt.league_id == league_id, Prompt.status == COMPLETED)
    )).scalars().all()
    if not prompt_ids:
        return []

    responses = (await session.execute(
        select(Response).where(Response.prompt_id.in_(prompt_ids), Response.is_published.is_(True))
    )).scalars().all()
    votes = (await session.execute(select(Vote).where(Vote.prompt_id.in_(prompt_ids)))).scalars().all()

    votes_by_prompt: dict[UUID, list[Vote]] = defaultdict(list)
    for v in votes:
        votes_by_prompt[v.prompt_id].append(v)
    voters_by_prompt = {pid: round_voters(vs) for pid, vs in votes_by_prompt.items()}

    acc: dict[UUID, dict] = defaultdict(lambda: {"points": 0, "subs": 0, "wins": 0, "podium": 0, "rank_sum": 0, "ranked": 0})
    for r in responses:
        a = acc[r.user_id]
        a["subs"] += 1
        if r.user_id in voters_by_prompt.get(r.prompt_id, set()):
            a["points"] += int(r.total_points)
        if r.final_rank is not None:
            a["ranked"] += 1
            a["rank_sum"] += r.final_rank
            if r.final_rank == 1:
                a["wins"] += 1
            if r.final_rank <= 3:
                a["podium"] += 1

    rounds_voted: dict[UUID, int] = defaultdict(int)
    for voters in voters_by_prompt.values():
        for uid in voters:
            rounds_voted[uid] += 1

    ordered = sorted(acc.items(), key=lambda kv: (-kv[1]["points"], -kv[1]["wins"], str(kv[0])))
    return [
        StandingRow(
            user_id=uid,
            total_points=a["points"],
            total_submissions=a["subs"],
            wins=a["wins"],
            podium_finishes=a["podium"],
            average_rank=round(a["rank_sum"] / a["ranked"], 2) if a["ranked"] else 0.0,
            rounds_voted=rounds_voted.get(uid, 0),
            league_rank=idx,
        )
        for idx, (uid, a) in enumerate(ordered, start=1)
    ]
