from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from rq import Queue
from redis import Redis
import structlog
from app.auth_deps import require_cron_secret
from app.config import settings
from app.db import get_session_factory
from app.jobs.advance_leagues import advance_leagues
from app.schemas.transitions import TransitionSummary
from app.services.transitions import process_due_transitions

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(require_cron_secret)])
log = structlog.get_logger()

_queue: Queue | None = None

def get_queue() -> Queue:
    # RQ queue (lazy single instance)
    global _queue
    if _queue is None:
        _queue = Queue(settings.transition_queue_name, connection=Redis.from_url(settings.redis_url))
    return _queue


@router.api_route("/prompt-cycle", methods=["GET", "POST"])
async def prompt_cycle(
    league_id: UUID | None = Query(default=None),
    enqueue: int = Query(default=0, ge=0, le=1, description="1=hand off to the RQ worker"),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    queue: Queue = Depends(get_queue),
):
    log.info("prompt_cycle_triggered", league_id=str(league_id) if league_id else None, enqueue=bool(enqueue))
    if enqueue:
        job = queue.enqueue(advance_leagues, str(league_id) if league_id else None)
        return {"status": "queued", "job_id": job.id}
    summary: TransitionSummary = await process_due_transitions(session_factory, league_id=league_id)
    return {"status": "ok", **summary.model_dump(mode="json")}
