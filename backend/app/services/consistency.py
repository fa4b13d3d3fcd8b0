"""Serialization of everything that rewrites the active rank ordering.

A rank sweep reads every active player's points, sorts them and rewrites the
``rank`` column. Two sweeps interleaving (or a sweep interleaving with a points
change) can leave duplicate or missing ranks, so every write path that may
change the order runs inside ``ranked_write``:

- a process-local lock serializes writers inside one API worker;
- on PostgreSQL a transaction-scoped advisory lock does the same across
  workers, with ``lock_timeout`` bounding every wait inside the transaction.

The caller commits inside the scope so the locks cover the commit. Any error
rolls the whole transaction back; lock timeouts surface as ``RankingConflict``.
"""

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Iterator

import sqlalchemy as sa
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.player import Player
from app.services.errors import RankingConflict
from app.services.ranking import Standing, assign_ranks

logger = logging.getLogger(__name__)

RANK_SWEEP_LOCK_KEY = 620_431_007
_LOCK_SQLSTATES = {"55P03", "40P01", "40001"}

_RANK_WRITE_LOCK = RLock()


def _is_postgres(db: Session) -> bool:
    return db.get_bind().dialect.name == "postgresql"


def _is_lock_error(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "sqlstate", None) in _LOCK_SQLSTATES or getattr(orig, "pgcode", None) in _LOCK_SQLSTATES:
        return True
    return "database is locked" in str(orig or exc).lower()


def _acquire_db_scope(db: Session) -> None:
    if not _is_postgres(db):
        # SQLite serializes writers with its database-level lock
        return
    timeout_ms = int(settings.DB_LOCK_TIMEOUT_MS)
    db.execute(sa.text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
    db.execute(sa.text("SELECT pg_advisory_xact_lock(:k)"), {"k": RANK_SWEEP_LOCK_KEY})


@contextmanager
def lock_errors_as_conflict(db: Session, *, reason: str = "") -> Iterator[Session]:
    """Roll back on any error and surface lock contention as ``RankingConflict``."""
    try:
        yield db
    except OperationalError as exc:
        db.rollback()
        if _is_lock_error(exc):
            logger.warning("Lock contention during %s: %s", reason or "write", exc.orig)
            raise RankingConflict("Concurrent modification, retry") from exc
        raise
    except Exception:
        db.rollback()
        raise


@contextmanager
def ranked_write(db: Session, *, reason: str = "", timeout_s: float | None = None) -> Iterator[Session]:
    timeout = settings.RANK_LOCK_TIMEOUT_SECONDS if timeout_s is None else timeout_s
    if not _RANK_WRITE_LOCK.acquire(timeout=timeout):
        logger.warning("Rank write scope busy after %.1fs (reason=%s)", timeout, reason)
        raise RankingConflict("Ranking is being updated by another request, retry")
    try:
        with lock_errors_as_conflict(db, reason=reason or "ranked write"):
            _acquire_db_scope(db)
            yield db
    finally:
        _RANK_WRITE_LOCK.release()


def sweep_ranks(db: Session) -> int:
    """Rewrite ``rank`` of every active player to its dense 1..N position.

    Must run inside ``ranked_write``. Only rows whose rank actually changes are
    written. Returns the number of active players.
    """
    db.flush()
    rows = db.execute(sa.text("""
        SELECT id, points, rank
        FROM players
        WHERE is_retired = :retired
    """), {"retired": False}).mappings().all()

    current = {int(r["id"]): int(r["rank"]) for r in rows}
    assignments = assign_ranks(Standing(player_id=int(r["id"]), points=int(r["points"])) for r in rows)
    changed = [{"r": a.rank, "id": a.player_id} for a in assignments if current[a.player_id] != a.rank]

    if changed:
        db.execute(sa.text("UPDATE players SET rank=:r WHERE id=:id"), changed)
        for obj in list(db.identity_map.values()):
            if isinstance(obj, Player):
                db.expire(obj, ["rank"])

    logger.debug("Rank sweep: %d active, %d changed", len(assignments), len(changed))
    return len(assignments)
