from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel

RECENT_PATTERN = r"^[WL]{0,10}$"


class PlayerOut(CamelModel):
    id: int
    rank: int
    name: str
    points: int
    peak_points: int
    recent_matches: str
    is_retired: bool
    combat_title: str | None = None
    wins: int
    losses: int
    win_streak: int
    kills: int
    team_champion: int
    mc_sat_champion: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlayerListOut(CamelModel):
    active: list[PlayerOut]
    retired: list[PlayerOut]


class PlayerCreateIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=80)
    rank: int | None = Field(default=None, ge=1)
    points: int = 0
    peak_points: int = 0
    recent_matches: str = Field(default="", pattern=RECENT_PATTERN)
    is_retired: bool = False
    combat_title: str | None = Field(default=None, max_length=120)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    win_streak: int = Field(default=0, ge=0)
    kills: int = Field(default=0, ge=0)
    team_champion: int = Field(default=0, ge=0)
    mc_sat_champion: int = Field(default=0, ge=0)


class PlayerUpdateIn(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=80)
    points: int | None = None
    peak_points: int | None = None
    recent_matches: str | None = Field(default=None, pattern=RECENT_PATTERN)
    is_retired: bool | None = None
    combat_title: str | None = Field(default=None, max_length=120)
    wins: int | None = Field(default=None, ge=0)
    losses: int | None = Field(default=None, ge=0)
    win_streak: int | None = Field(default=None, ge=0)
    kills: int | None = Field(default=None, ge=0)
    team_champion: int | None = Field(default=None, ge=0)
    mc_sat_champion: int | None = Field(default=None, ge=0)


class RankUpdateOut(CamelModel):
    ok: bool = True
    message: str
    ranked: int
