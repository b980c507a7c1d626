from __future__ import annotations
from datetime import datetime
from typing import Iterable
from uuid import UUID
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.league import League
from app.models.prompt import Prompt, SCHEDULED, ACTIVE, VOTING, COMPLETED
from app.models.response import Response
from app.models.vote import Vote
from app.services.ranking import RankedResponse

# Every "current prompt" question is answered from the store, never from cached state.

async def get_league(session: AsyncSession, league_id: UUID, *, for_update: bool = False) -> League | None:
    q = select(League).where(League.id == league_id)
    if for_update:
        # Serializes transitions per league on Postgres; ignored by SQLite.
        q = q.with_for_update()
    return await session.scalar(q)


async def candidate_league_ids(session: AsyncSession) -> list[UUID]:
    """Leagues that still have a prompt which is not COMPLETED."""
    rows = await session.execute(
        select(Prompt.league_id).where(Prompt.status != COMPLETED).distinct()
    )
    return sorted(rows.scalars().all(), key=str)


async def current_prompt(session: AsyncSession, league_id: UUID, status: str | None = None) -> Prompt | None:
    """The league's ACTIVE or VOTING prompt (or one of the given status)."""
    statuses = [status] if status else [ACTIVE, VOTING]
    return await session.scalar(
        select(Prompt)
        .where(Prompt.league_id == league_id, Prompt.status.in_(statuses))
        .order_by(Prompt.phase_started_at.asc())
        .limit(1)
    )


async def next_scheduled(session: AsyncSession, league_id: UUID) -> Prompt | None:
    return await session.scalar(
        select(Prompt)
        .where(Prompt.league_id == league_id, Prompt.status == SCHEDULED)
        .order_by(Prompt.queue_order.asc(), Prompt.created_at.asc(), Prompt.id.asc())
        .limit(1)
    )


async def list_prompts(session: AsyncSession, league_id: UUID) -> list[Prompt]:
    return (await session.execute(
        select(Prompt).where(Prompt.league_id == league_id).order_by(Prompt.queue_order.asc())
    )).scalars().all()


async def max_queue_order(session: AsyncSession, league_id: UUID) -> int:
    top = await session.scalar(
        select(func.coalesce(func.max(Prompt.queue_order), 0)).where(Prompt.league_id == league_id)
    )
    return int(top or 0)


async def responses_for_prompt(session: AsyncSession, prompt_id: UUID, *, published_only: bool = False) -> list[Response]:
    q = select(Response).where(Response.prompt_id == prompt_id)
    if published_only:
        q = q.where(Response.is_published.is_(True))
    return (await session.execute(q.order_by(Response.submitted_at.asc()))).scalars().all()


async def votes_for_prompt(session: AsyncSession, prompt_id: UUID) -> list[Vote]:
    return (await session.execute(select(Vote).where(Vote.prompt_id == prompt_id))).scalars().all()


async def transition_prompt(session: AsyncSession, prompt_id: UUID, expected: str, new_status: str, now: datetime) -> bool:
    """
    Conditional state write. Returns False when the prompt is no longer in
    `expected` status, i.e. another driver already moved it.
    """
    res = await session.execute(
        update(Prompt)
        .where(Prompt.id == prompt_id, Prompt.status == expected)
        .values(status=new_status, phase_started_at=now)
        .execution_options(synchronize_session="evaluate")
    )
    return res.rowcount == 1


async def publish_responses(session: AsyncSession, prompt_id: UUID, now: datetime) -> int:
    res = await session.execute(
        update(Response)
        .where(Response.prompt_id == prompt_id, Response.is_published.is_(False))
        .values(is_published=True, published_at=now)
        .execution_options(synchronize_session="evaluate")
    )
    return int(res.rowcount or 0)


def write_results(responses: Iterable[Response], ranked: Iterable[RankedResponse]) -> None:
    by_id = {r.id: r for r in responses}
    for row in ranked:
        r = by_id[row.response_id]
        r.total_votes = row.total_votes
        r.total_points = row.total_points
        r.final_rank = row.final_rank
