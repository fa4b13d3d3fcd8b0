import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin
from app.db.session import get_db
from app.schemas.match import MatchOutcomeOut, MatchRecordIn, MatchRecordOut
from app.services.errors import MatchValidationError, PlayerNotFound, RankingConflict
from app.services.match_recording import record_match

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=MatchRecordOut)
def create_match(payload: MatchRecordIn, current=Depends(get_current_admin), db: Session = Depends(get_db)):
    match_data = payload.match_data.model_dump() if payload.match_data else None
    try:
        outcome = record_match(
            db,
            payload.winner_id,
            payload.loser_id,
            payload.resolved_kills(),
            match_data=match_data,
            actor_user_id=current.id,
        )
    except MatchValidationError as exc:
        raise HTTPException(400, str(exc))
    except PlayerNotFound as exc:
        raise HTTPException(404, str(exc))
    except RankingConflict as exc:
        raise HTTPException(409, str(exc))
    except SQLAlchemyError:
        logger.exception("Recording match %s vs %s failed", payload.winner_id, payload.loser_id)
        raise HTTPException(500, "Failed to record match")

    return MatchRecordOut(
        message="Match recorded successfully",
        outcome=MatchOutcomeOut.model_validate(outcome),
    )
