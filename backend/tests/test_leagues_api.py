import uuid
import pytest

from app.models.prompt import Prompt
from app.services.clock import utcnow
from factories import auth, days, fetch, make_league, make_prompt, make_response


@pytest.mark.asyncio
async def test_requires_bearer_token(client, session_factory):
    lg = await make_league(session_factory)
    r = await client.get(f"/leagues/{lg.id}/settings")
    assert r.status_code in (401, 403)
    r = await client.get(f"/leagues/{lg.id}/settings", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_settings_read_and_update(client, session_factory):
    owner = uuid.uuid4()
    lg = await make_league(session_factory, owner_id=owner)

    r = await client.get(f"/leagues/{lg.id}/settings", headers=auth(uuid.uuid4()))
    assert r.status_code == 200, r.text
    assert r.json()["submission_days"] == 7 and r.json()["owner_id"] == str(owner)

    body = {"submission_days": 5, "voting_days": 3, "votes_per_player": 4}
    r = await client.put(f"/leagues/{lg.id}/settings", headers=auth(uuid.uuid4()), json=body)
    assert r.status_code == 403
    r = await client.put(f"/leagues/{lg.id}/settings", headers=auth(owner), json={**body, "submission_days": 15})
    assert r.status_code == 422
    r = await client.put(f"/leagues/{lg.id}/settings", headers=auth(owner), json=body)
    assert r.status_code == 200, r.text
    assert r.json()["votes_per_player"] == 4

    r = await client.get(f"/leagues/{uuid.uuid4()}/settings", headers=auth(owner))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_settings_conflict_during_phase(client, session_factory):
    owner = uuid.uuid4()
    lg = await make_league(session_factory, owner_id=owner)
    await make_prompt(session_factory, lg.id, status="ACTIVE", started=utcnow())
    r = await client.put(
        f"/leagues/{lg.id}/settings", headers=auth(owner),
        json={"submission_days": 3, "voting_days": 2, "votes_per_player": 3},
    )
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "phase_in_progress"


@pytest.mark.asyncio
async def test_prompt_queue_management(client, session_factory):
    owner = uuid.uuid4()
    lg = await make_league(session_factory, owner_id=owner)
    hdrs = auth(owner)

    ids = []
    for text in ("Morning light", "Street food", "Reflections"):
        r = await client.post(f"/leagues/{lg.id}/prompts", headers=hdrs, json={"text": text})
        assert r.status_code == 201, r.text
        ids.append(r.json()["id"])
    assert (await client.post(f"/leagues/{lg.id}/prompts", headers=auth(uuid.uuid4()), json={"text": "Nope"})).status_code == 403
    assert (await client.post(f"/leagues/{lg.id}/prompts", headers=hdrs, json={"text": "x"})).status_code == 422

    r = await client.post(f"/leagues/{lg.id}/prompts/reorder", headers=hdrs, json={"prompt_ids": [ids[2], ids[0], ids[1]]})
    assert r.status_code == 200, r.text
    assert [p["id"] for p in r.json()] == [ids[2], ids[0], ids[1]]

    r = await client.post(f"/leagues/{lg.id}/prompts/reorder", headers=hdrs, json={"prompt_ids": [ids[0], ids[0]]})
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "duplicate_prompt"

    r = await client.delete(f"/leagues/{lg.id}/prompts/{ids[0]}", headers=hdrs)
    assert r.status_code == 204
    r = await client.delete(f"/leagues/{lg.id}/prompts/{ids[0]}", headers=hdrs)
    assert r.status_code == 404

    r = await client.get(f"/leagues/{lg.id}/prompts", headers=hdrs)
    assert r.status_code == 200
    queue = r.json()
    assert [(p["id"], p["queue_order"]) for p in queue["scheduled"]] == [(ids[2], 1), (ids[1], 2)]
    assert queue["active"] == [] and queue["voting"] == [] and queue["completed"] == []


@pytest.mark.asyncio
async def test_current_prompt_countdown(client, session_factory):
    lg = await make_league(session_factory, submission_days=7)
    hdrs = auth(uuid.uuid4())
    r = await client.get(f"/leagues/{lg.id}/prompt", headers=hdrs)
    assert r.status_code == 200 and r.json()["prompt"] is None

    await make_prompt(session_factory, lg.id, status="ACTIVE", started=utcnow() - days(1))
    r = await client.get(f"/leagues/{lg.id}/prompt", headers=hdrs)
    data = r.json()
    assert data["prompt"]["status"] == "ACTIVE"
    assert data["next_phase"] == "VOTING"
    assert data["submissions_open"] is True and data["voting_open"] is False
    assert data["countdown"]["days"] in (5, 6)
    assert data["countdown"]["is_expired"] is False


@pytest.mark.asyncio
async def test_owner_transition_phase(client, session_factory):
    owner = uuid.uuid4()
    lg = await make_league(session_factory, owner_id=owner)
    p = await make_prompt(session_factory, lg.id, status="ACTIVE", started=utcnow() - days(1))
    await make_response(session_factory, p.id)

    r = await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(uuid.uuid4()))
    assert r.status_code == 403

    r = await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(owner))
    assert r.status_code == 200, r.text
    assert r.json()["voting_started"] == [str(p.id)]
    assert (await fetch(session_factory, Prompt, p.id)).status == "VOTING"

    r = await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(owner))
    assert r.json()["finalized"] == [str(p.id)]

    r = await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(owner))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_submit_response_and_standings(client, session_factory):
    owner, player = uuid.uuid4(), uuid.uuid4()
    lg = await make_league(session_factory, owner_id=owner)
    p = await make_prompt(session_factory, lg.id, status="ACTIVE", started=utcnow() - days(1))

    r = await client.post(
        f"/leagues/{lg.id}/responses", headers=auth(player),
        json={"image_url": "https://img.example/p.jpg", "caption": "blue door"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["prompt_id"] == str(p.id) and r.json()["is_published"] is False

    r = await client.post(f"/leagues/{uuid.uuid4()}/responses", headers=auth(player), json={"image_url": "https://img.example/p.jpg"})
    assert r.status_code == 400 and r.json()["detail"]["reason"] == "league_unavailable"

    await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(owner))
    await client.post(f"/leagues/{lg.id}/transition-phase", headers=auth(owner))

    r = await client.get(f"/leagues/{lg.id}/standings", headers=auth(player))
    assert r.status_code == 200
    rows = r.json()
    assert len(rows) == 1
    # player never voted, so the round earns no points
    assert rows[0]["user_id"] == str(player) and rows[0]["total_points"] == 0 and rows[0]["wins"] == 1
