from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from app.db import Base

class League(Base):
    __tablename__ = "leagues"
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Users live in the external account service; no FK.
    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    submission_days: Mapped[int] = mapped_column(Integer, nullable=False, default=7)   # 1..14
    voting_days: Mapped[int] = mapped_column(Integer, nullable=False, default=2)       # 1..7
    votes_per_player: Mapped[int] = mapped_column(Integer, nullable=False, default=3)  # 1..10
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
