from __future__ import annotations
from uuid import UUID
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.league import League
from app.models.prompt import ACTIVE, VOTING
from app.schemas.league import LeagueSettings
from app.services import prompt_store
from app.services.errors import LeagueConfigError, QueueError


def league_settings(league: League | None, league_id: UUID | None = None) -> LeagueSettings:
    """Validated phase settings for a league; raises LeagueConfigError otherwise."""
    if league is None:
        raise LeagueConfigError(league_id, "league not found")
    try:
        return LeagueSettings.model_validate(league)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise LeagueConfigError(league.id, f"invalid settings ({fields})") from e


async def create_league(session: AsyncSession, *, owner_id: UUID, name: str, league_settings_in: LeagueSettings | None = None) -> League:
    s = league_settings_in or LeagueSettings(
        submission_days=settings.default_submission_days,
        voting_days=settings.default_voting_days,
        votes_per_player=settings.default_votes_per_player,
    )
    lg = League(
        owner_id=owner_id,
        name=name,
        submission_days=s.submission_days,
        voting_days=s.voting_days,
        votes_per_player=s.votes_per_player,
    )
    session.add(lg)
    await session.flush()
    return lg


async def update_league_settings(session: AsyncSession, league: League, new: LeagueSettings) -> League:
    """
    Apply owner edits. A duration cannot change while its own phase runs, so
    a running phase always ends on the schedule it started with.
    """
    active = await prompt_store.current_prompt(session, league.id, ACTIVE)
    voting = await prompt_store.current_prompt(session, league.id, VOTING)
    if active is not None and new.submission_days != league.submission_days:
        raise QueueError("phase_in_progress", "submission_days cannot change while a prompt is accepting submissions")
    if voting is not None and (new.voting_days != league.voting_days or new.votes_per_player != league.votes_per_player):
        raise QueueError("phase_in_progress", "voting settings cannot change while a prompt is in voting")

    league.submission_days = new.submission_days
    league.voting_days = new.voting_days
    league.votes_per_player = new.votes_per_player
    await session.commit()
    return league
