from __future__ import annotations
from pydantic import BaseModel, Field, StrictInt
from uuid import UUID
from datetime import datetime
from app.schemas.response import ResponsePublic


class BallotCreate(BaseModel):
    league_id: UUID
    # response_id -> 1; dict keys keep every target distinct
    votes: dict[UUID, StrictInt] = Field(default_factory=dict)


class BallotState(BaseModel):
    prompt_id: UUID | None = None
    responses: list[ResponsePublic] = Field(default_factory=list)
    required_votes: int = 0
    existing_votes: list[UUID] = Field(default_factory=list)
    can_vote: bool = False
    voting_ends_at: datetime | None = None
    message: str | None = None


class BallotReceipt(BaseModel):
    prompt_id: UUID
    voter_id: UUID
    response_ids: list[UUID]
    self_vote_recorded: bool
