from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.prompt import Prompt, VOTING
from app.models.response import Response
from app.models.vote import Vote
from app.services import prompt_store
from app.services.errors import BallotRejected, LeagueConfigError
from app.services.leagues import league_settings
from app.services.phases import is_expired, phase_end_time


@dataclass
class BallotContext:
    prompt: Prompt
    votes_per_player: int
    votable: list[Response]
    own_response: Response | None
    existing: list[Vote] = field(default_factory=list)
    voting_ends_at: datetime | None = None
    is_open: bool = True

    @property
    def required_votes(self) -> int:
        return min(len(self.votable), self.votes_per_player)

    @property
    def has_self_vote(self) -> bool:
        return any(v.is_self_vote for v in self.existing)

    def ordinary_votes(self) -> list[Vote]:
        return [v for v in self.existing if not v.is_self_vote]


async def load_ballot(session: AsyncSession, league_id: UUID, voter_id: UUID, now: datetime, *, for_update: bool = False) -> BallotContext:
    """Current VOTING prompt of the league, what the voter may vote on, and what they already cast."""
    # for_update holds the league row so finalization cannot interleave with a ballot write
    league = await prompt_store.get_league(session, league_id, for_update=for_update)
    try:
        s = league_settings(league, league_id)
    except LeagueConfigError as e:
        raise BallotRejected("league_unavailable", str(e)) from e

    prompt = await prompt_store.current_prompt(session, league_id, VOTING)
    if prompt is None:
        raise BallotRejected("no_voting_prompt", "No voting session currently active")

    published = await prompt_store.responses_for_prompt(session, prompt.id, published_only=True)
    own = next((r for r in published if r.user_id == voter_id), None)
    votable = [r for r in published if r.user_id != voter_id]
    existing = [v for v in await prompt_store.votes_for_prompt(session, prompt.id) if v.voter_id == voter_id]
    return BallotContext(
        prompt=prompt,
        votes_per_player=s.votes_per_player,
        votable=votable,
        own_response=own,
        existing=existing,
        voting_ends_at=phase_end_time(prompt, s),
        is_open=not is_expired(prompt, s, now),
    )


def validate_ballot(ctx: BallotContext, votes: dict[UUID, int]) -> None:
    if not ctx.is_open:
        raise BallotRejected("voting_closed", "Voting window has closed")
    if any(v != 1 for v in votes.values()):
        raise BallotRejected("invalid_vote_value", "Each vote is worth exactly 1 point")
    if len(votes) != ctx.required_votes:
        raise BallotRejected(
            "wrong_vote_count", f"Must cast exactly {ctx.required_votes} votes, got {len(votes)}"
        )
    if ctx.own_response is not None and ctx.own_response.id in votes:
        raise BallotRejected("own_response", "Cannot vote for your own submission")
    votable_ids = {r.id for r in ctx.votable}
    unknown = [rid for rid in votes if rid not in votable_ids]
    if unknown:
        raise BallotRejected("unknown_response", f"Response {unknown[0]} is not part of the current vote")


async def submit_ballot(session: AsyncSession, league_id: UUID, voter_id: UUID, votes: dict[UUID, int], now: datetime) -> tuple[BallotContext, bool]:
    """
    Validate and store a voter's ballot for the league's VOTING prompt.

    The voter's ordinary votes are replaced wholesale (delete then insert in
    one transaction); the self-vote marker is written on the first ballot only.
    Returns the ballot context and whether a self-vote was recorded now.
    """
    ctx = await load_ballot(session, league_id, voter_id, now, for_update=True)
    validate_ballot(ctx, votes)

    prompt_id = ctx.prompt.id
    self_vote_new = False
    try:
        await session.execute(
            delete(Vote)
            .where(Vote.prompt_id == prompt_id, Vote.voter_id == voter_id, Vote.is_self_vote.is_(False))
            .execution_options(synchronize_session=False)
        )
        for rid in votes:
            session.add(Vote(prompt_id=prompt_id, response_id=rid, voter_id=voter_id, points=1, is_self_vote=False))
        if ctx.own_response is not None and not ctx.has_self_vote:
            session.add(Vote(prompt_id=prompt_id, response_id=ctx.own_response.id, voter_id=voter_id, points=1, is_self_vote=True))
            self_vote_new = True
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise BallotRejected("concurrent_ballot", "Another ballot from this voter was stored at the same time; retry") from e
    except Exception:
        await session.rollback()
        raise
    return ctx, self_vote_new
