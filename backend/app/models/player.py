from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base

class Player(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    rank: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)

    points: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    peak_points: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    recent_matches: Mapped[str] = mapped_column(sa.String(10), nullable=False, server_default="")  # oldest -> newest, W/L
    is_retired: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    combat_title: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    wins: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    losses: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    win_streak: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    kills: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    team_champion: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    mc_sat_champion: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    __table_args__ = (
        sa.Index("ix_players_active_points", "is_retired", sa.text("points DESC"), "id"),
        sa.Index("ix_players_active_rank", "is_retired", "rank"),
        sa.CheckConstraint("wins >= 0 AND losses >= 0", name="ck_players_record"),
        sa.CheckConstraint("win_streak >= 0 AND kills >= 0", name="ck_players_counters"),
        sa.CheckConstraint("team_champion >= 0 AND mc_sat_champion >= 0", name="ck_players_titles"),
    )
