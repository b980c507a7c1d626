from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "responses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("prompt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("total_votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("final_rank", sa.Integer(), nullable=True),
    )
    op.create_index("ix_responses_prompt_id", "responses", ["prompt_id"])
    op.create_index("ix_responses_user_id", "responses", ["user_id"])
    op.create_unique_constraint("uq_response_one_per_user_prompt", "responses", ["user_id", "prompt_id"])

    op.create_table(
        "votes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("prompt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("response_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("responses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("voter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_self_vote", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_votes_prompt_id", "votes", ["prompt_id"])
    op.create_index("ix_votes_response_id", "votes", ["response_id"])
    op.create_index("ix_votes_voter_id", "votes", ["voter_id"])
    op.create_unique_constraint("uq_vote_once_per_response", "votes", ["voter_id", "response_id"])
    op.create_index(
        "uq_vote_one_self_vote_per_prompt", "votes", ["voter_id", "prompt_id"], unique=True,
        postgresql_where=sa.text("is_self_vote"),
    )

def downgrade() -> None:
    op.drop_index("uq_vote_one_self_vote_per_prompt", table_name="votes")
    op.drop_constraint("uq_vote_once_per_response", "votes", type_="unique")
    op.drop_index("ix_votes_voter_id", table_name="votes")
    op.drop_index("ix_votes_response_id", table_name="votes")
    op.drop_index("ix_votes_prompt_id", table_name="votes")
    op.drop_table("votes")
    op.drop_constraint("uq_response_one_per_user_prompt", "responses", type_="unique")
    op.drop_index("ix_responses_user_id", table_name="responses")
    op.drop_index("ix_responses_prompt_id", table_name="responses")
    op.drop_table("responses")
