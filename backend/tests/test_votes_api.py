import uuid
import pytest
from sqlalchemy import select

from app.models.vote import Vote
from app.services import ballots
from app.services.clock import utcnow
from factories import auth, days, make_league, make_prompt, make_response


async def _voting_league(session_factory, voter):
    lg = await make_league(session_factory, voting_days=2, votes_per_player=2)
    p = await make_prompt(session_factory, lg.id, status="VOTING", started=utcnow() - days(1))
    own = await make_response(session_factory, p.id, voter, published=True)
    others = [await make_response(session_factory, p.id, published=True) for _ in range(3)]
    return lg, p, own, others


@pytest.mark.asyncio
async def test_ballot_state_and_cast(client, session_factory):
    voter = uuid.uuid4()
    lg, p, own, others = await _voting_league(session_factory, voter)
    hdrs = auth(voter)

    r = await client.get("/votes", params={"league_id": str(lg.id)}, headers=hdrs)
    assert r.status_code == 200, r.text
    state = r.json()
    assert state["prompt_id"] == str(p.id)
    assert state["required_votes"] == 2 and state["can_vote"] is True
    assert str(own.id) not in {x["id"] for x in state["responses"]}
    assert len(state["responses"]) == 3

    picks = [str(others[0].id), str(others[1].id)]
    r = await client.post("/votes", headers=hdrs, json={"league_id": str(lg.id), "votes": {k: 1 for k in picks}})
    assert r.status_code == 200, r.text
    assert r.json()["self_vote_recorded"] is True
    assert sorted(r.json()["response_ids"]) == sorted(picks)

    r = await client.get("/votes", params={"league_id": str(lg.id)}, headers=hdrs)
    assert sorted(r.json()["existing_votes"]) == sorted(picks)


@pytest.mark.asyncio
async def test_ballot_rejections_are_400(client, session_factory):
    voter = uuid.uuid4()
    lg, _, own, others = await _voting_league(session_factory, voter)
    hdrs = auth(voter)

    r = await client.post("/votes", headers=hdrs, json={"league_id": str(lg.id), "votes": {str(others[0].id): 1}})
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "wrong_vote_count"
    r = await client.post("/votes", headers=hdrs, json={"league_id": str(lg.id), "votes": {str(own.id): 1, str(others[0].id): 1}})
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "own_response"


@pytest.mark.asyncio
async def test_no_voting_session(client, session_factory):
    lg = await make_league(session_factory)
    r = await client.get("/votes", params={"league_id": str(lg.id)}, headers=auth(uuid.uuid4()))
    assert r.status_code == 200
    assert r.json()["can_vote"] is False and r.json()["prompt_id"] is None
    r = await client.post("/votes", headers=auth(uuid.uuid4()), json={"league_id": str(lg.id), "votes": {}})
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "no_voting_prompt"


@pytest.mark.asyncio
async def test_vote_values_must_be_plain_integers(client, session_factory):
    voter = uuid.uuid4()
    lg, _, _, others = await _voting_league(session_factory, voter)
    for value in (True, "1"):
        votes = {str(others[0].id): value, str(others[1].id): 1}
        r = await client.post("/votes", headers=auth(voter), json={"league_id": str(lg.id), "votes": votes})
        assert r.status_code == 422
    r = await client.post(
        "/votes", headers=auth(voter),
        json={"league_id": str(lg.id), "votes": {str(others[0].id): 2, str(others[1].id): 1}},
    )
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "invalid_vote_value"


@pytest.mark.asyncio
async def test_ballot_write_conflict_returns_409_and_keeps_previous_ballot(client, session_factory, monkeypatch):
    voter = uuid.uuid4()
    lg, p, own, others = await _voting_league(session_factory, voter)
    hdrs = auth(voter)
    first = [str(others[0].id), str(others[1].id)]
    r = await client.post("/votes", headers=hdrs, json={"league_id": str(lg.id), "votes": {k: 1 for k in first}})
    assert r.status_code == 200

    # the stored self-vote is not seen, so the write hits the one-self-vote index
    monkeypatch.setattr(ballots.BallotContext, "has_self_vote", property(lambda self: False))
    second = {str(others[1].id): 1, str(others[2].id): 1}
    r = await client.post("/votes", headers=hdrs, json={"league_id": str(lg.id), "votes": second})
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "concurrent_ballot"

    async with session_factory() as s:
        rows = (await s.execute(
            select(Vote).where(Vote.prompt_id == p.id, Vote.voter_id == voter)
        )).scalars().all()
    assert sorted(str(v.response_id) for v in rows if not v.is_self_vote) == sorted(first)
    assert [v.response_id for v in rows if v.is_self_vote] == [own.id]
