from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.db import get_session

router = APIRouter()

@router.get("/health")
async def health(request: Request, session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
        db_state = "ok"
    except SQLAlchemyError:
        db_state = "unavailable"
    return {
        "status": "ok",
        "database": db_state,
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
