import logging
from urllib import error as urlerror

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.prediction import PredictionOut
from app.services import players as player_service
from app.services.errors import PlayerNotFound
from app.services.prediction_provider import predict_for_player

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{player_id}/prediction", response_model=PredictionOut)
def player_prediction(player_id: int, db: Session = Depends(get_db)):
    try:
        player = player_service.get_player(db, player_id)
    except PlayerNotFound:
        raise HTTPException(404, "Player not found")

    top = player_service.top_active(db, limit=5)
    try:
        out = predict_for_player(player, top)
    except NotImplementedError as exc:
        raise HTTPException(503, str(exc))
    except (urlerror.URLError, TimeoutError, ValueError) as exc:
        logger.warning("Prediction provider failed for player %s: %s", player_id, exc)
        raise HTTPException(502, "Prediction provider unavailable")

    return PredictionOut(
        player_id=player_id,
        predicted_rank=out["predictedRank"],
        predicted_points=out["predictedPoints"],
        win_probability=out["winProbability"],
        improvement_areas=out["improvementAreas"],
        strength_areas=out["strengthAreas"],
        commentary=out["commentary"],
    )
