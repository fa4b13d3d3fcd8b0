from __future__ import annotations

import logging
import re

import sqlalchemy as sa
from sqlalchemy.orm import Session, aliased

from app.core.security import now_utc
from app.models.matchup import PlayerMatchup
from app.models.player import Player
from app.services.audit import audit
from app.services.consistency import lock_errors_as_conflict, ranked_write, sweep_ranks
from app.services.errors import PlayerNotFound, PlayerValidationError
from app.services.ranking import RECENT_MATCHES_WINDOW

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("wins", "losses", "win_streak", "kills", "team_champion", "mc_sat_champion")
EDITABLE_FIELDS = {
    "rank",
    "name",
    "points",
    "peak_points",
    "recent_matches",
    "is_retired",
    "combat_title",
    *COUNTER_FIELDS,
}
# rank is only a placement hint on create; afterwards the sweep owns it
UPDATABLE_FIELDS = EDITABLE_FIELDS - {"rank"}
NULLABLE_FIELDS = {"combat_title"}
RANK_AFFECTING_FIELDS = {"points", "is_retired"}

_RECENT_RE = re.compile(rf"^[WL]{{0,{RECENT_MATCHES_WINDOW}}}$")


def _validate_fields(data: dict, allowed: set[str] = EDITABLE_FIELDS) -> dict:
    if "rank" in data and "rank" not in allowed:
        raise PlayerValidationError("rank is assigned by the ranking and cannot be edited")
    unknown = set(data) - allowed
    if unknown:
        raise PlayerValidationError(f"Unknown player fields: {', '.join(sorted(unknown))}")

    out = dict(data)
    for key, value in out.items():
        if value is None and key not in NULLABLE_FIELDS:
            raise PlayerValidationError(f"{key} cannot be null")

    if "name" in out:
        name = str(out["name"]).strip()
        if not name:
            raise PlayerValidationError("name cannot be empty")
        out["name"] = name
    if "recent_matches" in out and not _RECENT_RE.match(out["recent_matches"]):
        raise PlayerValidationError(f"recent_matches must be at most {RECENT_MATCHES_WINDOW} W/L characters")
    if "rank" in out and out["rank"] < 1:
        raise PlayerValidationError("rank must be >= 1")
    for key in COUNTER_FIELDS:
        if key in out and out[key] < 0:
            raise PlayerValidationError(f"{key} must be >= 0")
    return out


def _active_count(db: Session) -> int:
    return int(db.execute(
        sa.select(sa.func.count()).select_from(Player).where(Player.is_retired.is_(False))
    ).scalar_one())


def _lock_player(db: Session, player_id: int) -> Player:
    player = db.execute(
        sa.select(Player).where(Player.id == player_id).with_for_update()
    ).scalar_one_or_none()
    if player is None:
        raise PlayerNotFound(player_id)
    return player


def list_players(db: Session) -> tuple[list[Player], list[Player]]:
    active = db.execute(
        sa.select(Player).where(Player.is_retired.is_(False)).order_by(Player.rank, Player.id)
    ).scalars().all()
    retired = db.execute(
        sa.select(Player).where(Player.is_retired.is_(True)).order_by(Player.points.desc(), Player.id)
    ).scalars().all()
    return list(active), list(retired)


def hall_of_fame(db: Session) -> list[Player]:
    rows = db.execute(
        sa.select(Player).where(Player.is_retired.is_(True)).order_by(Player.peak_points.desc(), Player.id)
    ).scalars().all()
    return list(rows)


def top_active(db: Session, limit: int = 5) -> list[Player]:
    rows = db.execute(
        sa.select(Player).where(Player.is_retired.is_(False)).order_by(Player.rank, Player.id).limit(limit)
    ).scalars().all()
    return list(rows)


def get_player(db: Session, player_id: int) -> Player:
    player = db.get(Player, player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return player


def create_player(db: Session, data: dict, *, actor_user_id: int | None = None) -> Player:
    """Insert a player and re-rank the active set.

    Without an explicit rank the player is placed at the end of the active
    list; the sweep then moves them to wherever their points belong.
    """
    fields = _validate_fields(data)
    if "name" not in fields:
        raise PlayerValidationError("name is required")

    with ranked_write(db, reason="create_player"):
        if "rank" not in fields:
            fields["rank"] = _active_count(db) + 1
        points = int(fields.get("points", 0))
        fields["peak_points"] = max(int(fields.get("peak_points", 0)), points)

        player = Player(**fields)
        db.add(player)
        db.flush()

        ranked = sweep_ranks(db)
        audit(db, actor_user_id, "player", player.id, "created", {
            "name": player.name,
            "points": points,
            "is_retired": bool(player.is_retired),
        })
        db.commit()

    logger.info("Player %s created (%s), %d active ranked", player.id, player.name, ranked)
    return player


def update_player(db: Session, player_id: int, changes: dict, *, actor_user_id: int | None = None) -> Player:
    """Apply a partial edit.

    Edits touching ``points`` or ``is_retired`` run under the ranking write
    scope and re-rank the active set when the value actually changes. A points
    edit raises ``peak_points`` to the new value unless the same edit sets
    ``peak_points`` explicitly.
    """
    fields = _validate_fields(changes, UPDATABLE_FIELDS)
    if not RANK_AFFECTING_FIELDS & set(fields):
        with lock_errors_as_conflict(db, reason="update_player"):
            player = _lock_player(db, player_id)
            _apply_fields(player, fields)
            audit(db, actor_user_id, "player", player_id, "updated", _jsonable(fields))
            db.commit()
        return player

    with ranked_write(db, reason="update_player"):
        player = _lock_player(db, player_id)
        before = (player.points, player.is_retired)

        if "points" in fields and "peak_points" not in fields:
            fields["peak_points"] = max(player.peak_points, int(fields["points"]))
        _apply_fields(player, fields)

        if before != (player.points, player.is_retired):
            sweep_ranks(db)
        audit(db, actor_user_id, "player", player_id, "updated", _jsonable(fields))
        db.commit()

    logger.info("Player %s updated (%s)", player_id, ", ".join(sorted(fields)))
    return player


def _apply_fields(player: Player, fields: dict) -> None:
    for key, value in fields.items():
        setattr(player, key, value)
    player.updated_at = now_utc()


def _jsonable(fields: dict) -> dict:
    return {k: v for k, v in fields.items() if isinstance(v, (str, int, bool)) or v is None}


def delete_player(db: Session, player_id: int, *, actor_user_id: int | None = None) -> bool:
    with ranked_write(db, reason="delete_player"):
        player = db.execute(
            sa.select(Player).where(Player.id == player_id).with_for_update()
        ).scalar_one_or_none()
        if player is None:
            db.rollback()
            return False
        name = player.name

        db.execute(sa.delete(PlayerMatchup).where(
            sa.or_(PlayerMatchup.player_id == player_id, PlayerMatchup.opponent_id == player_id)
        ))
        db.delete(player)
        db.flush()

        sweep_ranks(db)
        audit(db, actor_user_id, "player", player_id, "deleted", {"name": name})
        db.commit()

    logger.info("Player %s deleted", player_id)
    return True


def update_ranks(db: Session, *, actor_user_id: int | None = None) -> int:
    with ranked_write(db, reason="update_ranks"):
        ranked = sweep_ranks(db)
        audit(db, actor_user_id, "ranking", "players", "recomputed", {"active": ranked})
        db.commit()
    logger.info("Ranks recomputed for %d active players", ranked)
    return ranked


def list_matchups(db: Session, player_id: int) -> list[tuple[PlayerMatchup, Player]]:
    get_player(db, player_id)
    opponent = aliased(Player)
    rows = db.execute(
        sa.select(PlayerMatchup, opponent)
        .join(opponent, opponent.id == PlayerMatchup.opponent_id)
        .where(PlayerMatchup.player_id == player_id)
        .order_by(PlayerMatchup.last_match_date.desc(), PlayerMatchup.opponent_id)
    ).all()
    return [(m, o) for m, o in rows]


def get_matchup(db: Session, player_id: int, opponent_id: int) -> PlayerMatchup | None:
    return db.get(PlayerMatchup, (player_id, opponent_id))
