from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID


class LeagueSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    submission_days: int = Field(ge=1, le=14, description="Length of the submission (ACTIVE) phase")
    voting_days: int = Field(ge=1, le=7, description="Length of the VOTING phase")
    votes_per_player: int = Field(ge=1, le=10, description="Ordinary votes each player casts per prompt")


class LeagueSettingsPublic(LeagueSettings):
    league_id: UUID
    name: str
    owner_id: UUID


class StandingRow(BaseModel):
    user_id: UUID
    total_points: int
    total_submissions: int
    wins: int
    podium_finishes: int
    average_rank: float
    rounds_voted: int
    league_rank: int
