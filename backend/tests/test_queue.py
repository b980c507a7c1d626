import uuid
import pytest

from app.models.prompt import ACTIVE, COMPLETED
from app.schemas.league import LeagueSettings
from app.services import prompt_store
from app.services.errors import QueueError
from app.services.leagues import create_league, update_league_settings
from app.services.queue import enqueue_prompt, reorder_prompts, delete_scheduled_prompt
from factories import T0, make_league, make_prompt


async def _queue(session_factory, league_id):
    async with session_factory() as s:
        return [(p.text, p.queue_order) for p in await prompt_store.list_prompts(s, league_id) if p.status == "SCHEDULED"]


@pytest.mark.asyncio
async def test_enqueue_appends_after_the_highest_order(session_factory):
    lg = await make_league(session_factory)
    await make_prompt(session_factory, lg.id, status=COMPLETED, queue_order=4, text="Old one")
    async with session_factory() as s:
        a = await enqueue_prompt(s, lg.id, "  Morning light ")
    async with session_factory() as s:
        b = await enqueue_prompt(s, lg.id, "Street food", category="food")
    assert (a.text, a.queue_order, a.status) == ("Morning light", 5, "SCHEDULED")
    assert (b.queue_order, b.category) == (6, "food")


@pytest.mark.asyncio
async def test_reorder_changes_activation_order(session_factory):
    lg = await make_league(session_factory)
    p1 = await make_prompt(session_factory, lg.id, queue_order=1, text="one")
    p2 = await make_prompt(session_factory, lg.id, queue_order=2, text="two")
    p3 = await make_prompt(session_factory, lg.id, queue_order=3, text="three")

    async with session_factory() as s:
        await reorder_prompts(s, lg.id, [p3.id, p1.id, p2.id])
    assert await _queue(session_factory, lg.id) == [("three", 1), ("one", 2), ("two", 3)]
    async with session_factory() as s:
        assert (await prompt_store.next_scheduled(s, lg.id)).id == p3.id


@pytest.mark.asyncio
async def test_reorder_rejects_prompts_outside_the_queue(session_factory):
    lg = await make_league(session_factory)
    p1 = await make_prompt(session_factory, lg.id, queue_order=1)
    live = await make_prompt(session_factory, lg.id, status=ACTIVE, queue_order=2, started=T0)
    other = await make_league(session_factory)
    foreign = await make_prompt(session_factory, other.id, queue_order=1)

    for ids, reason in (
        ([p1.id, p1.id], "duplicate_prompt"),
        ([p1.id, live.id], "not_schedulable"),
        ([p1.id, foreign.id], "not_schedulable"),
        ([uuid.uuid4()], "not_schedulable"),
    ):
        async with session_factory() as s:
            with pytest.raises(QueueError) as e:
                await reorder_prompts(s, lg.id, ids)
        assert e.value.reason == reason


@pytest.mark.asyncio
async def test_delete_closes_the_gap(session_factory):
    lg = await make_league(session_factory)
    await make_prompt(session_factory, lg.id, queue_order=1, text="a")
    b = await make_prompt(session_factory, lg.id, queue_order=2, text="b")
    await make_prompt(session_factory, lg.id, queue_order=3, text="c")
    await make_prompt(session_factory, lg.id, queue_order=4, text="d")

    async with session_factory() as s:
        await delete_scheduled_prompt(s, lg.id, b.id)
    assert await _queue(session_factory, lg.id) == [("a", 1), ("c", 2), ("d", 3)]


@pytest.mark.asyncio
async def test_delete_only_scheduled_prompts_of_the_league(session_factory):
    lg = await make_league(session_factory)
    live = await make_prompt(session_factory, lg.id, status=ACTIVE, started=T0)
    other = await make_league(session_factory)
    foreign = await make_prompt(session_factory, other.id)

    async with session_factory() as s:
        with pytest.raises(QueueError) as e:
            await delete_scheduled_prompt(s, lg.id, live.id)
    assert e.value.reason == "not_schedulable"
    async with session_factory() as s:
        with pytest.raises(QueueError) as e:
            await delete_scheduled_prompt(s, lg.id, foreign.id)
    assert e.value.reason == "prompt_not_found"


@pytest.mark.asyncio
async def test_create_league_uses_configured_defaults(session_factory):
    owner = uuid.uuid4()
    async with session_factory() as s:
        lg = await create_league(s, owner_id=owner, name="Film Club")
        await s.commit()
    assert (lg.submission_days, lg.voting_days, lg.votes_per_player) == (7, 2, 3)
    assert lg.owner_id == owner


@pytest.mark.asyncio
async def test_settings_locked_while_their_phase_runs(session_factory):
    lg = await make_league(session_factory, submission_days=7, voting_days=2, votes_per_player=3)
    await make_prompt(session_factory, lg.id, status=ACTIVE, started=T0)

    async with session_factory() as s:
        row = await prompt_store.get_league(s, lg.id)
        with pytest.raises(QueueError) as e:
            await update_league_settings(s, row, LeagueSettings(submission_days=5, voting_days=2, votes_per_player=3))
    assert e.value.reason == "phase_in_progress"

    # voting settings are free while submissions are open
    async with session_factory() as s:
        row = await prompt_store.get_league(s, lg.id)
        updated = await update_league_settings(s, row, LeagueSettings(submission_days=7, voting_days=4, votes_per_player=5))
    assert (updated.voting_days, updated.votes_per_player) == (4, 5)


@pytest.mark.asyncio
async def test_voting_settings_locked_during_voting(session_factory):
    lg = await make_league(session_factory)
    await make_prompt(session_factory, lg.id, status="VOTING", started=T0)
    async with session_factory() as s:
        row = await prompt_store.get_league(s, lg.id)
        with pytest.raises(QueueError):
            await update_league_settings(s, row, LeagueSettings(submission_days=7, voting_days=2, votes_per_player=4))
    async with session_factory() as s:
        row = await prompt_store.get_league(s, lg.id)
        updated = await update_league_settings(s, row, LeagueSettings(submission_days=10, voting_days=2, votes_per_player=3))
    assert updated.submission_days == 10
