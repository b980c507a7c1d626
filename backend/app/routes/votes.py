from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth_deps import get_current_user_id
from app.db import get_session
from app.schemas.response import ResponsePublic
from app.schemas.vote import BallotCreate, BallotState, BallotReceipt
from app.services.ballots import load_ballot, submit_ballot
from app.services.clock import utcnow
from app.services.errors import BallotRejected

router = APIRouter(prefix="/votes", tags=["votes"])


@router.get("", response_model=BallotState)
async def ballot_state(
    league_id: UUID = Query(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        ctx = await load_ballot(session, league_id, user_id, utcnow())
    except BallotRejected as e:
        return BallotState(message=e.message)
    return BallotState(
        prompt_id=ctx.prompt.id,
        # own submission is filtered out of the votable list
        responses=[ResponsePublic.model_validate(r) for r in ctx.votable],
        required_votes=ctx.required_votes,
        existing_votes=[v.response_id for v in ctx.ordinary_votes()],
        can_vote=ctx.is_open,
        voting_ends_at=ctx.voting_ends_at,
        message=None if ctx.is_open else "Voting window has closed",
    )


@router.post("", response_model=BallotReceipt)
async def cast_ballot(
    payload: BallotCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        ctx, self_vote_new = await submit_ballot(session, payload.league_id, user_id, payload.votes, utcnow())
    except BallotRejected as e:
        status = 409 if e.reason == "concurrent_ballot" else 400
        raise HTTPException(status_code=status, detail=e.detail())
    return BallotReceipt(
        prompt_id=ctx.prompt.id,
        voter_id=user_id,
        response_ids=list(payload.votes),
        self_vote_recorded=self_vote_new or ctx.has_self_vote,
    )
