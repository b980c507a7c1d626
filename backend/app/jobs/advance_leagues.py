from __future__ import annotations
import asyncio
from uuid import UUID
import structlog
from app.db import SessionLocal
from app.services.transitions import process_due_transitions

log = structlog.get_logger()

async def _run(league_id: str | None) -> dict:
    lid = UUID(league_id) if league_id else None
    summary = await process_due_transitions(SessionLocal, league_id=lid)
    return summary.model_dump(mode="json")

def advance_leagues(league_id: str | None = None) -> dict:
    # RQ entry point (sync); run the async coroutine
    structlog.contextvars.bind_contextvars(job="advance_leagues")
    try:
        result = asyncio.run(_run(league_id))
        if result["errors"]:
            log.warning("advance_leagues_partial", league_id=league_id, failed=sorted(result["errors"]))
        return result
    finally:
        structlog.contextvars.clear_contextvars()
