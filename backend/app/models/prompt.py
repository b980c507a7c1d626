from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Index, CheckConstraint, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from app.db import Base

SCHEDULED = "SCHEDULED"
ACTIVE = "ACTIVE"        # submission window
VOTING = "VOTING"
COMPLETED = "COMPLETED"

PHASES = (SCHEDULED, ACTIVE, VOTING, COMPLETED)


class Prompt(Base):
    """
    One challenge round inside a league.

    Status only moves forward: SCHEDULED -> ACTIVE -> VOTING -> COMPLETED.
    Every transition stamps phase_started_at; it stays NULL until activation.
    """
    __tablename__ = "prompts"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    league_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("leagues.id", ondelete="CASCADE"), index=True, nullable=False
    )
    text: Mapped[str] = mapped_column(Text(), nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SCHEDULED)
    queue_order: Mapped[int] = mapped_column(Integer, nullable=False)
    phase_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("status IN ('SCHEDULED','ACTIVE','VOTING','COMPLETED')", name="ck_prompts_status"),
        Index("ix_prompts_league_status_queue", "league_id", "status", "queue_order"),
        # At most one ACTIVE and one VOTING prompt per league; a racing activation fails here.
        Index(
            "uq_prompts_one_active_per_league", "league_id", unique=True,
            postgresql_where=sa_text("status = 'ACTIVE'"), sqlite_where=sa_text("status = 'ACTIVE'"),
        ),
        Index(
            "uq_prompts_one_voting_per_league", "league_id", unique=True,
            postgresql_where=sa_text("status = 'VOTING'"), sqlite_where=sa_text("status = 'VOTING'"),
        ),
    )
