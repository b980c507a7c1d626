from __future__ import annotations
from datetime import datetime
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.prompt import ACTIVE
from app.models.response import Response
from app.services import prompt_store
from app.services.errors import ResponseRejected, LeagueConfigError
from app.services.leagues import league_settings
from app.services.phases import is_submission_open


async def submit_response(
    session: AsyncSession,
    *,
    league_id: UUID,
    user_id: UUID,
    image_url: str,
    caption: str | None,
    now: datetime,
) -> Response:
    """
    Create or replace the user's response to the league's ACTIVE prompt.
    Resubmitting refreshes submitted_at, which is the final ranking tie-break.
    """
    try:
        s = league_settings(await prompt_store.get_league(session, league_id, for_update=True), league_id)
    except LeagueConfigError as e:
        raise ResponseRejected("league_unavailable", str(e)) from e

    prompt = await prompt_store.current_prompt(session, league_id, ACTIVE)
    if prompt is None:
        raise ResponseRejected("no_active_prompt", "No prompt is accepting submissions")
    if not is_submission_open(prompt, s, now):
        raise ResponseRejected("submission_closed", "The submission window has closed")

    existing = await session.scalar(
        select(Response).where(Response.prompt_id == prompt.id, Response.user_id == user_id)
    )
    if existing is not None:
        existing.image_url = image_url
        existing.caption = caption
        existing.submitted_at = now
        r = existing
    else:
        r = Response(prompt_id=prompt.id, user_id=user_id, image_url=image_url, caption=caption, submitted_at=now)
        session.add(r)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise ResponseRejected("duplicate_submission", "A submission for this prompt was stored concurrently; retry") from e
    return r
