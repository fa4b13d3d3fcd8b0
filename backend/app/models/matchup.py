from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base

class PlayerMatchup(Base):
    """Head-to-head record of ``player_id`` against ``opponent_id``.

    One row per directed pair: A-over-B and B-over-A are independent rows,
    each only updated from the perspective of its own ``player_id``.
    """

    __tablename__ = "player_matchups"

    player_id: Mapped[int] = mapped_column(sa.Integer, sa.ForeignKey("players.id", ondelete="CASCADE"), primary_key=True)
    opponent_id: Mapped[int] = mapped_column(sa.Integer, sa.ForeignKey("players.id", ondelete="CASCADE"), primary_key=True)

    wins: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    losses: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")

    last_match_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    last_match_location: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    last_match_score: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    __table_args__ = (
        sa.Index("ix_player_matchups_player_last", "player_id", sa.text("last_match_date DESC")),
        sa.CheckConstraint("player_id <> opponent_id", name="ck_matchup_distinct"),
    )
