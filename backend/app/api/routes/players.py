import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin
from app.db.session import get_db
from app.schemas.common import SimpleOKOut
from app.schemas.matchup import MatchupOut, MatchupWithOpponentOut, OpponentOut
from app.schemas.player import (
    PlayerCreateIn,
    PlayerListOut,
    PlayerOut,
    PlayerUpdateIn,
    RankUpdateOut,
)
from app.services import players as player_service
from app.services.errors import PlayerNotFound, PlayerValidationError, RankingConflict

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PlayerListOut)
def list_players(db: Session = Depends(get_db)):
    active, retired = player_service.list_players(db)
    return PlayerListOut(
        active=[PlayerOut.model_validate(p) for p in active],
        retired=[PlayerOut.model_validate(p) for p in retired],
    )


@router.get("/hall-of-fame", response_model=list[PlayerOut])
def hall_of_fame(db: Session = Depends(get_db)):
    return [PlayerOut.model_validate(p) for p in player_service.hall_of_fame(db)]


@router.post("/update-ranks", response_model=RankUpdateOut)
def update_ranks(current=Depends(get_current_admin), db: Session = Depends(get_db)):
    try:
        ranked = player_service.update_ranks(db, actor_user_id=current.id)
    except RankingConflict as exc:
        raise HTTPException(409, str(exc))
    except SQLAlchemyError:
        logger.exception("Rank recomputation failed")
        raise HTTPException(500, "Failed to update ranks")
    return RankUpdateOut(message="Ranks updated successfully", ranked=ranked)


@router.get("/{player_id}", response_model=PlayerOut)
def get_player(player_id: int, db: Session = Depends(get_db)):
    try:
        player = player_service.get_player(db, player_id)
    except PlayerNotFound:
        raise HTTPException(404, "Player not found")
    return PlayerOut.model_validate(player)


@router.post("", response_model=PlayerOut, status_code=201)
def create_player(payload: PlayerCreateIn, current=Depends(get_current_admin), db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_unset=True)
    if data.get("rank") is None:
        data.pop("rank", None)
    try:
        player = player_service.create_player(db, data, actor_user_id=current.id)
    except PlayerValidationError as exc:
        raise HTTPException(400, str(exc))
    except RankingConflict as exc:
        raise HTTPException(409, str(exc))
    except SQLAlchemyError:
        logger.exception("Player creation failed")
        raise HTTPException(500, "Failed to create player")
    return PlayerOut.model_validate(player)


@router.put("/{player_id}", response_model=PlayerOut)
def update_player(player_id: int, payload: PlayerUpdateIn, current=Depends(get_current_admin), db: Session = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True)
    try:
        player = player_service.update_player(db, player_id, changes, actor_user_id=current.id)
    except PlayerNotFound:
        raise HTTPException(404, "Player not found")
    except PlayerValidationError as exc:
        raise HTTPException(400, str(exc))
    except RankingConflict as exc:
        raise HTTPException(409, str(exc))
    except SQLAlchemyError:
        logger.exception("Player %s update failed", player_id)
        raise HTTPException(500, "Failed to update player")
    return PlayerOut.model_validate(player)


@router.delete("/{player_id}", response_model=SimpleOKOut)
def delete_player(player_id: int, current=Depends(get_current_admin), db: Session = Depends(get_db)):
    try:
        removed = player_service.delete_player(db, player_id, actor_user_id=current.id)
    except RankingConflict as exc:
        raise HTTPException(409, str(exc))
    except SQLAlchemyError:
        logger.exception("Player %s deletion failed", player_id)
        raise HTTPException(500, "Failed to delete player")
    if not removed:
        raise HTTPException(404, "Player not found")
    return SimpleOKOut(message="Player deleted successfully")


@router.get("/{player_id}/matchups", response_model=list[MatchupWithOpponentOut])
def player_matchups(player_id: int, db: Session = Depends(get_db)):
    try:
        rows = player_service.list_matchups(db, player_id)
    except PlayerNotFound:
        raise HTTPException(404, "Player not found")
    return [
        MatchupWithOpponentOut(
            **MatchupOut.model_validate(m).model_dump(),
            opponent=OpponentOut.model_validate(o),
        )
        for m, o in rows
    ]


@router.get("/{player_id}/matchups/{opponent_id}", response_model=MatchupOut)
def matchup_between(player_id: int, opponent_id: int, db: Session = Depends(get_db)):
    matchup = player_service.get_matchup(db, player_id, opponent_id)
    if not matchup:
        raise HTTPException(404, "Matchup not found")
    return MatchupOut.model_validate(matchup)
