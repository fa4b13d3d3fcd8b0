from dataclasses import dataclass, replace
from typing import Iterable

RECENT_MATCHES_WINDOW = 10
CLOSE_LOSS_MAX_KILLS = 2

EXPECTED_WIN_POINTS = 1
EQUAL_RANK_WIN_POINTS = 3
UPSET_MAX_POINTS = 10
UPSET_RANKS_PER_POINT = 3

@dataclass(frozen=True)
class MatchPoints:
    winner_delta: int
    loser_delta: int

@dataclass(frozen=True)
class Standing:
    player_id: int
    points: int

@dataclass(frozen=True)
class RankAssignment:
    player_id: int
    rank: int

@dataclass(frozen=True)
class PlayerStats:
    points: int = 0
    peak_points: int = 0
    wins: int = 0
    losses: int = 0
    win_streak: int = 0
    kills: int = 0
    recent_matches: str = ""

def winner_points(winner_rank: int, loser_rank: int) -> int:
    d = winner_rank - loser_rank
    if d < 0:
        return EXPECTED_WIN_POINTS
    if d > 0:
        return min(UPSET_MAX_POINTS, 1 + d // UPSET_RANKS_PER_POINT)
    return EQUAL_RANK_WIN_POINTS

def compute_match_points(winner_rank: int, loser_rank: int, winner_kills: int) -> MatchPoints:
    """Point deltas for one match, from the participants' pre-match ranks.

    The winner's reward grows with the size of the upset (capped), an expected
    win is worth the minimum, and the loser gets a single point for a close
    loss (the winner scored at most ``CLOSE_LOSS_MAX_KILLS`` kills). Nothing
    is ever subtracted.
    """
    loser_delta = 1 if winner_kills <= CLOSE_LOSS_MAX_KILLS else 0
    return MatchPoints(winner_delta=winner_points(winner_rank, loser_rank), loser_delta=loser_delta)

def assign_ranks(standings: Iterable[Standing]) -> list[RankAssignment]:
    # points desc, id asc on ties
    ordered = sorted(standings, key=lambda s: (-s.points, s.player_id))
    return [RankAssignment(player_id=s.player_id, rank=i) for i, s in enumerate(ordered, start=1)]

def append_recent_result(history: str | None, outcome: str) -> str:
    if outcome not in ("W", "L"):
        raise ValueError("outcome must be 'W' or 'L'")
    return ((history or "") + outcome)[-RECENT_MATCHES_WINDOW:]

def apply_win(stats: PlayerStats, delta: int, kills: int) -> PlayerStats:
    points = stats.points + delta
    return replace(
        stats,
        points=points,
        peak_points=max(stats.peak_points, points),
        wins=stats.wins + 1,
        win_streak=stats.win_streak + 1,
        kills=stats.kills + kills,
        recent_matches=append_recent_result(stats.recent_matches, "W"),
    )

def apply_loss(stats: PlayerStats, delta: int) -> PlayerStats:
    return replace(
        stats,
        points=stats.points + delta,
        losses=stats.losses + 1,
        win_streak=0,
        recent_matches=append_recent_result(stats.recent_matches, "L"),
    )
