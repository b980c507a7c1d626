from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth_deps import get_current_user_id
from app.db import get_session
from app.models.league import League
from app.models.prompt import ACTIVE, VOTING, SCHEDULED, COMPLETED
from app.schemas.league import LeagueSettings, LeagueSettingsPublic, StandingRow
from app.schemas.prompt import PromptCreate, PromptPublic, PromptQueue, PromptReorder, CurrentPrompt, PhaseCountdown
from app.schemas.response import ResponseCreate, ResponsePublic
from app.services import prompt_store
from app.services.clock import utcnow
from app.services.errors import LeagueConfigError, QueueError, ResponseRejected
from app.services.leagues import league_settings, update_league_settings
from app.services.phases import next_phase, phase_end_time, time_until_phase_end, is_submission_open, is_voting_open
from app.services.queue import enqueue_prompt, reorder_prompts, delete_scheduled_prompt
from app.services.responses import submit_response
from app.services.standings import league_standings
from app.services.transitions import advance_league

router = APIRouter(prefix="/leagues", tags=["leagues"])


async def _league_or_404(session: AsyncSession, league_id: UUID) -> League:
    lg = await prompt_store.get_league(session, league_id)
    if not lg:
        raise HTTPException(status_code=404, detail="League not found")
    return lg

def _require_owner(lg: League, user_id: UUID) -> None:
    if lg.owner_id != user_id:
        raise HTTPException(status_code=403, detail="Only the league owner can do this")

def _settings_public(lg: League) -> LeagueSettingsPublic:
    return LeagueSettingsPublic(
        league_id=lg.id, name=lg.name, owner_id=lg.owner_id,
        submission_days=lg.submission_days, voting_days=lg.voting_days, votes_per_player=lg.votes_per_player,
    )


@router.get("/{league_id}/settings", response_model=LeagueSettingsPublic)
async def get_settings(league_id: UUID, session: AsyncSession = Depends(get_session), user_id: UUID = Depends(get_current_user_id)):
    return _settings_public(await _league_or_404(session, league_id))

@router.put("/{league_id}/settings", response_model=LeagueSettingsPublic)
async def put_settings(
    league_id: UUID,
    payload: LeagueSettings,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    lg = await _league_or_404(session, league_id)
    _require_owner(lg, user_id)
    try:
        lg = await update_league_settings(session, lg, payload)
    except QueueError as e:
        raise HTTPException(status_code=409, detail=e.detail())
    return _settings_public(lg)


@router.get("/{league_id}/prompt", response_model=CurrentPrompt)
async def current_prompt(league_id: UUID, session: AsyncSession = Depends(get_session), user_id: UUID = Depends(get_current_user_id)):
    lg = await _league_or_404(session, league_id)
    try:
        s = league_settings(lg, league_id)
    except LeagueConfigError as e:
        raise HTTPException(status_code=409, detail=str(e))
    p = await prompt_store.current_prompt(session, league_id)
    if p is None:
        return CurrentPrompt()
    now = utcnow()
    remaining = time_until_phase_end(p, s, now)
    return CurrentPrompt(
        prompt=PromptPublic.model_validate(p),
        phase_ends_at=phase_end_time(p, s),
        next_phase=next_phase(p.status),
        countdown=PhaseCountdown(**remaining._asdict()),
        submissions_open=is_submission_open(p, s, now),
        voting_open=is_voting_open(p, s, now),
    )


@router.get("/{league_id}/prompts", response_model=PromptQueue)
async def list_prompts(league_id: UUID, session: AsyncSession = Depends(get_session), user_id: UUID = Depends(get_current_user_id)):
    await _league_or_404(session, league_id)
    rows = [PromptPublic.model_validate(p) for p in await prompt_store.list_prompts(session, league_id)]
    return PromptQueue(
        active=[p for p in rows if p.status == ACTIVE],
        voting=[p for p in rows if p.status == VOTING],
        scheduled=[p for p in rows if p.status == SCHEDULED],
        completed=[p for p in rows if p.status == COMPLETED],
    )

@router.post("/{league_id}/prompts", response_model=PromptPublic, status_code=201)
async def create_prompt(
    league_id: UUID,
    payload: PromptCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    lg = await _league_or_404(session, league_id)
    _require_owner(lg, user_id)
    p = await enqueue_prompt(session, league_id, payload.text, payload.category)
    return PromptPublic.model_validate(p)

@router.post("/{league_id}/prompts/reorder", response_model=list[PromptPublic])
async def reorder(
    league_id: UUID,
    payload: PromptReorder,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    lg = await _league_or_404(session, league_id)
    _require_owner(lg, user_id)
    try:
        rows = await reorder_prompts(session, league_id, payload.prompt_ids)
    except QueueError as e:
        raise HTTPException(status_code=400, detail=e.detail())
    return [PromptPublic.model_validate(p) for p in rows]

@router.delete("/{league_id}/prompts/{prompt_id}", status_code=204)
async def delete_prompt(
    league_id: UUID,
    prompt_id: UUID,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    lg = await _league_or_404(session, league_id)
    _require_owner(lg, user_id)
    try:
        await delete_scheduled_prompt(session, league_id, prompt_id)
    except QueueError as e:
        code = 404 if e.reason == "prompt_not_found" else 400
        raise HTTPException(status_code=code, detail=e.detail())


@router.post("/{league_id}/transition-phase")
async def transition_phase(league_id: UUID, session: AsyncSession = Depends(get_session), user_id: UUID = Depends(get_current_user_id)):
    """Owner-triggered: close the current phase now instead of waiting for it to expire."""
    lg = await _league_or_404(session, league_id)
    _require_owner(lg, user_id)
    try:
        outcome = await advance_league(session, league_id, utcnow(), force=True)
    except LeagueConfigError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=503, detail="Transition failed; retry")
    if not outcome.advanced:
        raise HTTPException(status_code=400, detail="Nothing to transition")
    return {
        "league_id": str(league_id),
        "voting_started": [str(x) for x in outcome.voting_started],
        "finalized": [str(x) for x in outcome.finalized],
        "activated": [str(x) for x in outcome.activated],
    }


@router.post("/{league_id}/responses", response_model=ResponsePublic, status_code=201)
async def post_response(
    league_id: UUID,
    payload: ResponseCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        r = await submit_response(
            session, league_id=league_id, user_id=user_id,
            image_url=payload.image_url, caption=payload.caption, now=utcnow(),
        )
    except ResponseRejected as e:
        raise HTTPException(status_code=409 if e.reason == "duplicate_submission" else 400, detail=e.detail())
    return ResponsePublic.model_validate(r)


@router.get("/{league_id}/standings", response_model=list[StandingRow])
async def standings(league_id: UUID, session: AsyncSession = Depends(get_session), user_id: UUID = Depends(get_current_user_id)):
    await _league_or_404(session, league_id)
    return await league_standings(session, league_id)
