from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime


class ResponseCreate(BaseModel):
    image_url: str = Field(min_length=1, max_length=2048)
    caption: str | None = Field(default=None, max_length=500)


class ResponsePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_id: UUID
    user_id: UUID
    image_url: str
    caption: str | None = None
    submitted_at: datetime
    is_published: bool
    total_votes: int
    total_points: int
    final_rank: int | None = None
