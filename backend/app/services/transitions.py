"""
Per-league prompt lifecycle driver.

Invoked by an external periodic trigger; it never schedules itself. Each call
re-derives the league's current prompt from the store, applies at most the
transitions that are due, and commits each step through a conditional
status write so concurrent or repeated calls cannot apply a step twice.

Within one league:
  1. ACTIVE expired   -> VOTING     (responses published)
     VOTING expired   -> COMPLETED  (votes tallied, responses ranked)
  2. no ACTIVE/VOTING -> lowest-queue_order SCHEDULED prompt becomes ACTIVE

Step 1 commits before step 2 runs, so a failure while activating leaves the
finalized results in place and the next call only retries the activation.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.prompt import Prompt, SCHEDULED, ACTIVE, VOTING, COMPLETED
from app.schemas.transitions import TransitionSummary
from app.services import prompt_store
from app.services.clock import utcnow
from app.services.errors import LeagueConfigError, TransitionConflict
from app.services.leagues import league_settings
from app.services.phases import is_expired
from app.services.ranking import rank_responses
from app.services.tally import tally_votes

log = structlog.get_logger()


@dataclass
class LeagueOutcome:
    league_id: UUID
    voting_started: list[UUID] = field(default_factory=list)
    finalized: list[UUID] = field(default_factory=list)
    activated: list[UUID] = field(default_factory=list)

    @property
    def advanced(self) -> bool:
        return bool(self.voting_started or self.finalized or self.activated)


async def start_voting(session: AsyncSession, prompt: Prompt, now: datetime) -> int:
    """ACTIVE -> VOTING; publishes the prompt's responses. Returns how many were published."""
    if not await prompt_store.transition_prompt(session, prompt.id, ACTIVE, VOTING, now):
        raise TransitionConflict(prompt.id)
    return await prompt_store.publish_responses(session, prompt.id, now)


async def finalize_prompt(session: AsyncSession, prompt: Prompt, now: datetime) -> int:
    """VOTING -> COMPLETED; tallies votes and writes totals and ranks. Returns response count."""
    # Claim the transition first: a second driver gets zero rows and backs off.
    if not await prompt_store.transition_prompt(session, prompt.id, VOTING, COMPLETED, now):
        raise TransitionConflict(prompt.id)
    responses = await prompt_store.responses_for_prompt(session, prompt.id)
    votes = await prompt_store.votes_for_prompt(session, prompt.id)
    tallies = tally_votes(votes, [r.id for r in responses])
    ranked = rank_responses(responses, tallies)
    prompt_store.write_results(responses, ranked)
    return len(ranked)


async def activate_next(session: AsyncSession, league_id: UUID, now: datetime) -> Prompt | None:
    """SCHEDULED -> ACTIVE for the head of the queue, only if the league is idle."""
    if await prompt_store.current_prompt(session, league_id) is not None:
        return None
    nxt = await prompt_store.next_scheduled(session, league_id)
    if nxt is None:
        return None
    try:
        ok = await prompt_store.transition_prompt(session, nxt.id, SCHEDULED, ACTIVE, now)
    except IntegrityError as e:
        # one-ACTIVE-per-league index: a concurrent driver activated first
        raise TransitionConflict(nxt.id) from e
    if not ok:
        raise TransitionConflict(nxt.id)
    return nxt


async def _close_current(session: AsyncSession, league_id: UUID, now: datetime, force: bool, outcome: LeagueOutcome) -> None:
    league = await prompt_store.get_league(session, league_id, for_update=True)
    durations = league_settings(league, league_id)
    current = await prompt_store.current_prompt(session, league_id)
    if current is None or not (force or is_expired(current, durations, now)):
        return

    bound = log.bind(league_id=str(league_id), prompt_id=str(current.id))
    if current.status == ACTIVE:
        published = await start_voting(session, current, now)
        await session.commit()
        outcome.voting_started.append(current.id)
        bound.info("prompt_voting_started", published=published, forced=force)
    elif current.status == VOTING:
        ranked = await finalize_prompt(session, current, now)
        await session.commit()
        outcome.finalized.append(current.id)
        bound.info("prompt_completed", responses_ranked=ranked, forced=force)


async def advance_league(session: AsyncSession, league_id: UUID, now: datetime | None = None, *, force: bool = False) -> LeagueOutcome:
    """
    Apply the transitions due for one league.

    With force=True the current phase is closed even if it has time left
    (owner-triggered transition). Conflicts with a concurrent driver are a
    no-op; other errors roll back the step in flight and propagate.
    """
    now = now or utcnow()
    outcome = LeagueOutcome(league_id=league_id)
    try:
        await _close_current(session, league_id, now, force, outcome)
    except TransitionConflict as e:
        await session.rollback()
        log.info("transition_conflict", league_id=str(league_id), prompt_id=str(e.args[0]), step="close")
        return outcome
    except (LeagueConfigError, SQLAlchemyError):
        await session.rollback()
        raise
    await session.rollback()  # release the row lock from a no-op read

    # queue auto-advance
    try:
        await prompt_store.get_league(session, league_id, for_update=True)
        nxt = await activate_next(session, league_id, now)
        if nxt is not None:
            await session.commit()
            outcome.activated.append(nxt.id)
            log.info("prompt_activated", league_id=str(league_id), prompt_id=str(nxt.id), queue_order=nxt.queue_order)
        else:
            await session.rollback()
    except TransitionConflict as e:
        await session.rollback()
        log.info("transition_conflict", league_id=str(league_id), prompt_id=str(e.args[0]), step="activate")
    except SQLAlchemyError:
        await session.rollback()
        raise
    return outcome


async def process_due_transitions(
    session_factory: async_sessionmaker[AsyncSession],
    league_id: UUID | None = None,
    now: datetime | None = None,
) -> TransitionSummary:
    """
    Trigger entry point: advance one league, or every league with unfinished
    prompts. Each league runs in its own session; one league's failure is
    recorded in the summary and does not stop the others.
    """
    now = now or utcnow()
    summary = TransitionSummary()

    if league_id is not None:
        league_ids = [league_id]
    else:
        async with session_factory() as session:
            league_ids = await prompt_store.candidate_league_ids(session)

    for lid in league_ids:
        summary.leagues_checked += 1
        async with session_factory() as session:
            try:
                outcome = await advance_league(session, lid, now)
            except LeagueConfigError as e:
                summary.errors[str(lid)] = str(e)
                log.warning("league_config_error", league_id=str(lid), error=str(e))
                continue
            except SQLAlchemyError as e:
                summary.errors[str(lid)] = f"{type(e).__name__}: {e}"
                log.error("league_transition_failed", league_id=str(lid), error=str(e))
                continue
            except Exception as e:
                await session.rollback()
                summary.errors[str(lid)] = f"{type(e).__name__}: {e}"
                log.error("league_transition_failed", league_id=str(lid), error=str(e), exc_info=True)
                continue
        if outcome.advanced:
            summary.leagues_advanced.append(lid)
        summary.prompts_voting.extend(outcome.voting_started)
        summary.prompts_finalized.extend(outcome.finalized)
        summary.prompts_activated.extend(outcome.activated)

    log.info(
        "prompt_cycle_processed",
        leagues_checked=summary.leagues_checked,
        advanced=len(summary.leagues_advanced),
        finalized=len(summary.prompts_finalized),
        activated=len(summary.prompts_activated),
        errors=len(summary.errors),
    )
    return summary
