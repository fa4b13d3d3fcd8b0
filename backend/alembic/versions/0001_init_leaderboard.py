"""init leaderboard schema

Revision ID: 0001_init_leaderboard
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init_leaderboard"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    # users (admins)
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.Text, nullable=False, unique=True),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status in ('active','blocked')", name="ck_user_status"),
    )

    # players
    op.create_table(
        "players",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("peak_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("recent_matches", sa.String(10), nullable=False, server_default=""),
        sa.Column("is_retired", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("combat_title", sa.Text, nullable=True),
        sa.Column("wins", sa.Integer, nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer, nullable=False, server_default="0"),
        sa.Column("win_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("kills", sa.Integer, nullable=False, server_default="0"),
        sa.Column("team_champion", sa.Integer, nullable=False, server_default="0"),
        sa.Column("mc_sat_champion", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("wins >= 0 AND losses >= 0", name="ck_players_record"),
        sa.CheckConstraint("win_streak >= 0 AND kills >= 0", name="ck_players_counters"),
        sa.CheckConstraint("team_champion >= 0 AND mc_sat_champion >= 0", name="ck_players_titles"),
    )
    op.create_index("ix_players_active_points", "players", ["is_retired", sa.text("points DESC"), "id"])
    op.create_index("ix_players_active_rank", "players", ["is_retired", "rank"])

    # audit_log
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("actor_user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("entity_type", sa.Text, nullable=False),
        sa.Column("entity_id", sa.Text, nullable=False),
        sa.Column("action", sa.Text, nullable=False),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_actor_created", "audit_log", ["actor_user_id", sa.text("created_at DESC")])

def downgrade():
    op.drop_index("ix_audit_actor_created", table_name="audit_log")
    op.drop_index("ix_audit_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_players_active_rank", table_name="players")
    op.drop_index("ix_players_active_points", table_name="players")
    op.drop_table("players")
    op.drop_table("users")
