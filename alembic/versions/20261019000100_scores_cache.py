"""scores cache and provider settings

Revision ID: 20261019000100
Revises: 
Create Date: 2026-10-19 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019000100"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scores",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("game_id", sa.String(length=100), nullable=False),
        sa.Column("sport_type", sa.String(length=50), nullable=False),
        sa.Column("home_team", sa.String(length=100), nullable=False),
        sa.Column("away_team", sa.String(length=100), nullable=False),
        sa.Column("home_team_logo", sa.String(length=500), nullable=True),
        sa.Column("away_team_logo", sa.String(length=500), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("away_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("period", sa.String(length=50), nullable=True),
        sa.Column("time_remaining", sa.String(length=20), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue", sa.String(length=200), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('scheduled', 'live', 'halftime', 'final', 'postponed', 'cancelled')",
            name="ck_scores_valid_status",
        ),
        sa.CheckConstraint("home_score >= 0 AND away_score >= 0", name="ck_scores_valid_scores"),
    )
    op.create_index("ix_scores_id", "scores", ["id"], unique=False)
    op.create_index("ix_scores_game_id", "scores", ["game_id"], unique=True)
    op.create_index("ix_scores_sport_status", "scores", ["sport_type", "status"], unique=False)
    op.create_index("ix_scores_scheduled_at", "scores", ["scheduled_at"], unique=False)
    op.create_index("ix_scores_last_updated", "scores", ["last_updated"], unique=False)

    op.create_table(
        "provider_settings",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("use_real_api", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("api_key_enc", sa.Text(), nullable=True),
        sa.Column(
            "updated_at_utc",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("provider_settings")
    op.drop_index("ix_scores_last_updated", table_name="scores")
    op.drop_index("ix_scores_scheduled_at", table_name="scores")
    op.drop_index("ix_scores_sport_status", table_name="scores")
    op.drop_index("ix_scores_game_id", table_name="scores")
    op.drop_index("ix_scores_id", table_name="scores")
    op.drop_table("scores")
