from __future__ import annotations
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.prompt import Prompt, SCHEDULED
from app.services import prompt_store
from app.services.errors import QueueError


async def enqueue_prompt(session: AsyncSession, league_id: UUID, text: str, category: str | None = None) -> Prompt:
    """Append a SCHEDULED prompt to the end of the league's queue."""
    top = await prompt_store.max_queue_order(session, league_id)
    p = Prompt(league_id=league_id, text=text.strip(), category=category, status=SCHEDULED, queue_order=top + 1)
    session.add(p)
    await session.commit()
    return p


async def reorder_prompts(session: AsyncSession, league_id: UUID, prompt_ids: list[UUID]) -> list[Prompt]:
    """
    Rewrite queue order for the given SCHEDULED prompts: index 0 activates first.
    Prompts that already left the queue cannot be reordered.
    """
    if len(set(prompt_ids)) != len(prompt_ids):
        raise QueueError("duplicate_prompt", "prompt_ids must be unique")
    rows = (await session.execute(
        select(Prompt).where(
            Prompt.id.in_(prompt_ids),
            Prompt.league_id == league_id,
            Prompt.status == SCHEDULED,
        )
    )).scalars().all()
    if len(rows) != len(prompt_ids):
        raise QueueError("not_schedulable", "some prompts were not found or are no longer queued")

    by_id = {p.id: p for p in rows}
    ordered = [by_id[pid] for pid in prompt_ids]
    for idx, p in enumerate(ordered, start=1):
        p.queue_order = idx
    await session.commit()
    return ordered


async def delete_scheduled_prompt(session: AsyncSession, league_id: UUID, prompt_id: UUID) -> None:
    p = await session.get(Prompt, prompt_id)
    if p is None or p.league_id != league_id:
        raise QueueError("prompt_not_found", "prompt not found in this league")
    if p.status != SCHEDULED:
        raise QueueError("not_schedulable", "only scheduled prompts can be deleted")

    gap = p.queue_order
    await session.delete(p)
    await session.flush()

    # close the gap left in the queue
    later = (await session.execute(
        select(Prompt)
        .where(Prompt.league_id == league_id, Prompt.status == SCHEDULED, Prompt.queue_order > gap)
        .order_by(Prompt.queue_order.asc())
    )).scalars().all()
    for i, q in enumerate(later):
        q.queue_order = gap + i
    await session.commit()
