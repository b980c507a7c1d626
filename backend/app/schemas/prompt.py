from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from typing import Literal
from uuid import UUID
from datetime import datetime

PromptStatus = Literal["SCHEDULED", "ACTIVE", "VOTING", "COMPLETED"]


class PromptCreate(BaseModel):
    text: str = Field(min_length=3, max_length=500)
    category: str | None = Field(default=None, max_length=64)


class PromptReorder(BaseModel):
    prompt_ids: list[UUID] = Field(min_length=1)


class PromptPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    league_id: UUID
    text: str
    category: str | None = None
    status: PromptStatus
    queue_order: int
    phase_started_at: datetime | None = None


class PromptQueue(BaseModel):
    active: list[PromptPublic]
    voting: list[PromptPublic]
    scheduled: list[PromptPublic]
    completed: list[PromptPublic]


class PhaseCountdown(BaseModel):
    days: int
    hours: int
    minutes: int
    is_expired: bool


class CurrentPrompt(BaseModel):
    prompt: PromptPublic | None = None
    phase_ends_at: datetime | None = None
    next_phase: PromptStatus | None = None
    countdown: PhaseCountdown | None = None
    submissions_open: bool = False
    voting_open: bool = False
