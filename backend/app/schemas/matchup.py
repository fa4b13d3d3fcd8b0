from datetime import datetime

from app.schemas.common import CamelModel


class OpponentOut(CamelModel):
    id: int
    name: str
    rank: int
    points: int
    is_retired: bool


class MatchupOut(CamelModel):
    player_id: int
    opponent_id: int
    wins: int
    losses: int
    last_match_date: datetime | None = None
    last_match_location: str | None = None
    last_match_score: str | None = None


class MatchupWithOpponentOut(MatchupOut):
    opponent: OpponentOut | None = None
