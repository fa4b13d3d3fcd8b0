"""player matchups (head-to-head)

Revision ID: 0002_player_matchups
Revises: 0001_init_leaderboard
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_player_matchups"
down_revision = "0001_init_leaderboard"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "player_matchups",
        sa.Column("player_id", sa.Integer, sa.ForeignKey("players.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("opponent_id", sa.Integer, sa.ForeignKey("players.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("wins", sa.Integer, nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_match_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_match_location", sa.Text, nullable=True),
        sa.Column("last_match_score", sa.Text, nullable=True),
        sa.CheckConstraint("player_id <> opponent_id", name="ck_matchup_distinct"),
    )
    op.create_index(
        "ix_player_matchups_player_last",
        "player_matchups",
        ["player_id", sa.text("last_match_date DESC")],
    )


def downgrade():
    op.drop_index("ix_player_matchups_player_last", table_name="player_matchups")
    op.drop_table("player_matchups")
