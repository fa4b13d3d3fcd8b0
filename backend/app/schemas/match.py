from datetime import datetime

from pydantic import Field, model_validator

from app.schemas.common import CamelModel


class MatchDataIn(CamelModel):
    location: str | None = Field(default=None, max_length=120)
    score: str | None = Field(default=None, max_length=40)
    match_date: datetime | None = None


class WinnerDataIn(CamelModel):
    kills: int | None = Field(default=None, ge=0)


class MatchRecordIn(CamelModel):
    winner_id: int
    loser_id: int
    winner_kills: int | None = Field(default=None, ge=0)
    match_data: MatchDataIn | None = None
    # older clients send the kill count nested under winnerData
    winner_data: WinnerDataIn | None = None

    @model_validator(mode="after")
    def validate_players(self):
        if self.winner_id == self.loser_id:
            raise ValueError("winnerId and loserId must be different players")
        return self

    def resolved_kills(self) -> int:
        if self.winner_kills is not None:
            return self.winner_kills
        if self.winner_data is not None and self.winner_data.kills is not None:
            return self.winner_data.kills
        return 0


class MatchOutcomeOut(CamelModel):
    winner_id: int
    loser_id: int
    winner_delta: int
    loser_delta: int
    winner_points: int
    loser_points: int
    winner_rank_before: int
    loser_rank_before: int


class MatchRecordOut(CamelModel):
    ok: bool = True
    message: str
    outcome: MatchOutcomeOut
