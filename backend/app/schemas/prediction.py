from pydantic import Field

from app.schemas.common import CamelModel


class PredictionOut(CamelModel):
    player_id: int
    predicted_rank: int
    predicted_points: int
    win_probability: float = Field(..., ge=0.0, le=1.0)
    improvement_areas: list[str]
    strength_areas: list[str]
    commentary: str
