from __future__ import annotations
from pydantic import BaseModel, Field
from uuid import UUID


class TransitionSummary(BaseModel):
    leagues_checked: int = 0
    leagues_advanced: list[UUID] = Field(default_factory=list)
    prompts_voting: list[UUID] = Field(default_factory=list)
    prompts_finalized: list[UUID] = Field(default_factory=list)
    prompts_activated: list[UUID] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)  # league_id -> reason
