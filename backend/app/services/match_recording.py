from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Session

from app.core.security import now_utc
from app.models.matchup import PlayerMatchup
from app.models.player import Player
from app.services.audit import audit
from app.services.consistency import ranked_write, sweep_ranks
from app.services.errors import MatchValidationError, PlayerNotFound
from app.services.ranking import PlayerStats, apply_loss, apply_win, compute_match_points

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class MatchOutcome:
    winner_id: int
    loser_id: int
    winner_delta: int
    loser_delta: int
    winner_points: int
    loser_points: int
    winner_rank_before: int
    loser_rank_before: int

def _validate(winner_id: int, loser_id: int, winner_kills) -> None:
    if isinstance(winner_kills, bool) or not isinstance(winner_kills, int):
        raise MatchValidationError("winner_kills must be an integer")
    if winner_kills < 0:
        raise MatchValidationError("winner_kills must be >= 0")
    if winner_id == loser_id:
        raise MatchValidationError("winner and loser must be different players")

def _lock_pair(db: Session, winner_id: int, loser_id: int) -> dict[int, Player]:
    # lock in id order so two matches over the same pair cannot deadlock
    rows = db.execute(
        sa.select(Player)
        .where(Player.id.in_([winner_id, loser_id]))
        .order_by(Player.id)
        .with_for_update()
    ).scalars().all()
    by_id = {p.id: p for p in rows}
    for pid in (winner_id, loser_id):
        if pid not in by_id:
            raise PlayerNotFound(pid)
        if by_id[pid].is_retired:
            raise MatchValidationError(f"Player {pid} is retired")
    return by_id

def _stats(player: Player) -> PlayerStats:
    return PlayerStats(
        points=player.points or 0,
        peak_points=player.peak_points or 0,
        wins=player.wins or 0,
        losses=player.losses or 0,
        win_streak=player.win_streak or 0,
        kills=player.kills or 0,
        recent_matches=player.recent_matches or "",
    )

def _store_stats(player: Player, stats: PlayerStats, updated_at: datetime) -> None:
    player.points = stats.points
    player.peak_points = stats.peak_points
    player.wins = stats.wins
    player.losses = stats.losses
    player.win_streak = stats.win_streak
    player.kills = stats.kills
    player.recent_matches = stats.recent_matches
    player.updated_at = updated_at

def _apply_win(player: Player, delta: int, kills: int, updated_at: datetime) -> None:
    _store_stats(player, apply_win(_stats(player), delta, kills), updated_at)

def _apply_loss(player: Player, delta: int, updated_at: datetime) -> None:
    _store_stats(player, apply_loss(_stats(player), delta), updated_at)

def _record_matchup(
    db: Session,
    player_id: int,
    opponent_id: int,
    *,
    won: bool,
    played_at: datetime,
    location: str | None,
    score: str | None,
) -> PlayerMatchup:
    row = db.execute(
        sa.select(PlayerMatchup)
        .where(PlayerMatchup.player_id == player_id, PlayerMatchup.opponent_id == opponent_id)
        .with_for_update()
    ).scalar_one_or_none()
    if row is None:
        row = PlayerMatchup(player_id=player_id, opponent_id=opponent_id, wins=0, losses=0)
        db.add(row)

    if won:
        row.wins = (row.wins or 0) + 1
    else:
        row.losses = (row.losses or 0) + 1
    row.last_match_date = played_at
    row.last_match_location = location
    row.last_match_score = score
    return row

def record_match(
    db: Session,
    winner_id: int,
    loser_id: int,
    winner_kills: int = 0,
    *,
    match_data: dict | None = None,
    actor_user_id: int | None = None,
) -> MatchOutcome:
    """Record one match result as a single transaction.

    Deltas come from the pre-match ranks. Both players, both directed matchup
    rows and the full re-rank are committed together or not at all.
    """
    _validate(winner_id, loser_id, winner_kills)
    match_data = match_data or {}
    now = now_utc()
    played_at = match_data.get("match_date") or now

    with ranked_write(db, reason="record_match"):
        by_id = _lock_pair(db, winner_id, loser_id)
        winner = by_id[winner_id]
        loser = by_id[loser_id]

        winner_rank, loser_rank = winner.rank, loser.rank
        pts = compute_match_points(winner_rank, loser_rank, winner_kills)

        _apply_win(winner, pts.winner_delta, winner_kills, now)
        _apply_loss(loser, pts.loser_delta, now)

        location = match_data.get("location")
        score = match_data.get("score")
        _record_matchup(db, winner_id, loser_id, won=True, played_at=played_at, location=location, score=score)
        _record_matchup(db, loser_id, winner_id, won=False, played_at=played_at, location=location, score=score)
        db.flush()

        outcome = MatchOutcome(
            winner_id=winner_id,
            loser_id=loser_id,
            winner_delta=pts.winner_delta,
            loser_delta=pts.loser_delta,
            winner_points=winner.points,
            loser_points=loser.points,
            winner_rank_before=winner_rank,
            loser_rank_before=loser_rank,
        )

        sweep_ranks(db)
        audit(db, actor_user_id, "match", f"{winner_id}:{loser_id}", "recorded", {
            "winner_id": winner_id,
            "loser_id": loser_id,
            "winner_kills": winner_kills,
            "winner_delta": pts.winner_delta,
            "loser_delta": pts.loser_delta,
            "winner_rank_before": winner_rank,
            "loser_rank_before": loser_rank,
        })
        db.commit()

    logger.info(
        "Match recorded: %s beat %s (+%d / +%d, kills=%d)",
        winner_id, loser_id, pts.winner_delta, pts.loser_delta, winner_kills,
    )
    return outcome
