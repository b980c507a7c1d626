from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "leagues",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("submission_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("voting_days", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("votes_per_player", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_leagues_owner_id", "leagues", ["owner_id"])

    op.create_table(
        "prompts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("league_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("leagues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="SCHEDULED"),
        sa.Column("queue_order", sa.Integer(), nullable=False),
        sa.Column("phase_started_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("status IN ('SCHEDULED','ACTIVE','VOTING','COMPLETED')", name="ck_prompts_status"),
    )
    op.create_index("ix_prompts_league_id", "prompts", ["league_id"])
    op.create_index("ix_prompts_league_status_queue", "prompts", ["league_id", "status", "queue_order"])
    # one ACTIVE and one VOTING prompt per league at most
    op.create_index(
        "uq_prompts_one_active_per_league", "prompts", ["league_id"], unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )
    op.create_index(
        "uq_prompts_one_voting_per_league", "prompts", ["league_id"], unique=True,
        postgresql_where=sa.text("status = 'VOTING'"),
    )

def downgrade() -> None:
    op.drop_index("uq_prompts_one_voting_per_league", table_name="prompts")
    op.drop_index("uq_prompts_one_active_per_league", table_name="prompts")
    op.drop_index("ix_prompts_league_status_queue", table_name="prompts")
    op.drop_index("ix_prompts_league_id", table_name="prompts")
    op.drop_table("prompts")
    op.drop_index("ix_leagues_owner_id", table_name="leagues")
    op.drop_table("leagues")
