from __future__ import annotations

import threading

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from app.models.audit_log import AuditLog
from app.models.matchup import PlayerMatchup
from app.models.player import Player
from app.services import consistency, match_recording
from app.services import players as player_service
from app.services.errors import MatchValidationError, PlayerNotFound, RankingConflict
from app.services.match_recording import record_match


def _active_ranks(db) -> list[int]:
    db.expire_all()
    return sorted(p.rank for p in db.execute(sa.select(Player).where(Player.is_retired.is_(False))).scalars())


def _assert_dense(db) -> None:
    ranks = _active_ranks(db)
    assert ranks == list(range(1, len(ranks) + 1))


def test_end_to_end_expected_win(db):
    a = player_service.create_player(db, {"name": "A", "rank": 1, "points": 100})
    b = player_service.create_player(db, {"name": "B", "rank": 2, "points": 90})

    outcome = record_match(db, a.id, b.id, 5)

    assert outcome.winner_delta == 1
    assert outcome.loser_delta == 0
    db.expire_all()
    a, b = db.get(Player, a.id), db.get(Player, b.id)
    assert (a.points, a.rank, a.wins, a.win_streak, a.kills, a.recent_matches) == (101, 1, 1, 1, 5, "W")
    assert (b.points, b.rank, b.losses, b.win_streak, b.recent_matches) == (90, 2, 1, 0, "L")
    assert a.peak_points == 101
    assert b.kills == 0


def test_upset_uses_pre_match_ranks_and_reranks(db):
    ids = [player_service.create_player(db, {"name": f"P{i}", "points": pts}).id for i, pts in enumerate([20, 19, 18, 17])]
    underdog, leader = ids[3], ids[0]

    outcome = record_match(db, underdog, leader, 1)

    assert outcome.winner_rank_before == 4
    assert outcome.loser_rank_before == 1
    assert outcome.winner_delta == 2
    assert outcome.loser_delta == 1
    db.expire_all()
    assert db.get(Player, underdog).points == 19
    assert db.get(Player, leader).points == 21
    assert db.get(Player, leader).rank == 1
    _assert_dense(db)


def test_matchup_rows_are_recorded_from_each_side(db):
    a = player_service.create_player(db, {"name": "A", "points": 5})
    b = player_service.create_player(db, {"name": "B", "points": 5})

    record_match(db, a.id, b.id, 3, match_data={"location": "Arena", "score": "3-1"})
    record_match(db, a.id, b.id, 2)
    record_match(db, b.id, a.id, 0)

    db.expire_all()
    ab = db.get(PlayerMatchup, (a.id, b.id))
    ba = db.get(PlayerMatchup, (b.id, a.id))
    assert (ab.wins, ab.losses) == (2, 1)
    assert (ba.wins, ba.losses) == (1, 2)
    assert ab.last_match_location is None

    rows = player_service.list_matchups(db, a.id)
    assert [(m.opponent_id, o.name) for m, o in rows] == [(b.id, "B")]


def test_rank_density_after_mixed_operations(db):
    ids = [player_service.create_player(db, {"name": f"P{i}", "points": i * 3}).id for i in range(6)]
    _assert_dense(db)

    record_match(db, ids[0], ids[5], 0)
    _assert_dense(db)

    assert player_service.delete_player(db, ids[2]) is True
    _assert_dense(db)

    player_service.update_player(db, ids[1], {"is_retired": True})
    _assert_dense(db)

    player_service.create_player(db, {"name": "late", "points": 7})
    record_match(db, ids[3], ids[4], 9)
    _assert_dense(db)
    assert len(_active_ranks(db)) == 5


def test_recent_matches_window_over_many_matches(db):
    a = player_service.create_player(db, {"name": "A"})
    b = player_service.create_player(db, {"name": "B"})
    for _ in range(12):
        record_match(db, a.id, b.id, 0)
    record_match(db, b.id, a.id, 0)

    db.expire_all()
    assert db.get(Player, a.id).recent_matches == "WWWWWWWWWL"
    assert db.get(Player, b.id).recent_matches == "LLLLLLLLLW"
    assert db.get(Player, a.id).win_streak == 0
    assert db.get(Player, b.id).win_streak == 1


def test_failure_in_loser_update_rolls_back_everything(db, monkeypatch):
    a = player_service.create_player(db, {"name": "A", "points": 10})
    b = player_service.create_player(db, {"name": "B", "points": 5})

    def _boom(*args, **kwargs):
        raise RuntimeError("storage failure")

    monkeypatch.setattr(match_recording, "_apply_loss", _boom)
    with pytest.raises(RuntimeError):
        record_match(db, b.id, a.id, 4)

    db.expire_all()
    a, b = db.get(Player, a.id), db.get(Player, b.id)
    assert (a.points, a.losses, a.recent_matches, a.rank) == (10, 0, "", 1)
    assert (b.points, b.wins, b.kills, b.recent_matches, b.rank) == (5, 0, 0, "", 2)
    assert db.execute(sa.select(sa.func.count()).select_from(PlayerMatchup)).scalar_one() == 0
    assert db.execute(sa.select(AuditLog).where(AuditLog.entity_type == "match")).first() is None


def test_missing_player_writes_nothing(db):
    a = player_service.create_player(db, {"name": "A", "points": 10})

    with pytest.raises(PlayerNotFound):
        record_match(db, a.id, 999, 1)

    db.expire_all()
    a = db.get(Player, a.id)
    assert (a.points, a.wins, a.recent_matches) == (10, 0, "")


@pytest.mark.parametrize("kills", [-1, 1.5, "3", True])
def test_invalid_kills_rejected(db, kills):
    with pytest.raises(MatchValidationError):
        record_match(db, 1, 2, kills)


def test_self_match_rejected(db):
    a = player_service.create_player(db, {"name": "A"})
    with pytest.raises(MatchValidationError):
        record_match(db, a.id, a.id, 0)


def test_match_writes_audit_entry(db):
    a = player_service.create_player(db, {"name": "A"})
    b = player_service.create_player(db, {"name": "B"})
    record_match(db, a.id, b.id, 2)

    row = db.execute(sa.select(AuditLog).where(AuditLog.entity_type == "match")).scalar_one()
    assert row.action == "recorded"
    assert row.entity_id == f"{a.id}:{b.id}"
    assert row.data["winner_kills"] == 2


def test_busy_rank_scope_raises_conflict(db):
    held = threading.Event()
    release = threading.Event()

    def _holder():
        with consistency._RANK_WRITE_LOCK:
            held.set()
            release.wait(5)

    t = threading.Thread(target=_holder)
    t.start()
    try:
        assert held.wait(5)
        with pytest.raises(RankingConflict):
            with consistency.ranked_write(db, reason="test", timeout_s=0.05):
                pass
    finally:
        release.set()
        t.join()


def test_database_lock_error_becomes_conflict(db):
    with pytest.raises(RankingConflict):
        with consistency.ranked_write(db, reason="test"):
            raise OperationalError("UPDATE players", {}, Exception("database is locked"))


def test_other_operational_errors_propagate(db):
    with pytest.raises(OperationalError):
        with consistency.ranked_write(db, reason="test"):
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))


def test_retired_player_cannot_be_recorded(db):
    vet = player_service.create_player(db, {"name": "Vet", "points": 50})
    a = player_service.create_player(db, {"name": "A", "points": 10})
    b = player_service.create_player(db, {"name": "B", "points": 5})
    player_service.update_player(db, vet.id, {"is_retired": True})

    with pytest.raises(MatchValidationError):
        record_match(db, vet.id, a.id, 3)
    with pytest.raises(MatchValidationError):
        record_match(db, b.id, vet.id, 3)

    db.expire_all()
    assert db.get(Player, vet.id).wins == 0
    assert db.get(Player, a.id).losses == 0
    assert db.execute(sa.select(sa.func.count()).select_from(PlayerMatchup)).scalar_one() == 0
    _assert_dense(db)
