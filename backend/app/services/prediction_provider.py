from __future__ import annotations

import json
import logging
from typing import Protocol
from urllib import request as urlrequest

from app.core.config import settings
from app.models.player import Player

logger = logging.getLogger(__name__)

VALID_PROVIDERS = {"none", "http"}


class PredictionProviderAdapter(Protocol):
    provider_code: str

    def predict(self, snapshot: dict) -> dict:
        ...


class NoopPredictionProvider:
    provider_code = "none"

    def predict(self, snapshot: dict) -> dict:
        raise NotImplementedError("No prediction provider configured")


class HttpPredictionProvider:
    """Forwards the player snapshot to an external text-generation service."""

    provider_code = "http"

    def __init__(self, endpoint_url: str | None, api_key: str | None = None, timeout: int = 20):
        self.endpoint_url = endpoint_url
        self.api_key = api_key
        self.timeout = timeout

    def predict(self, snapshot: dict) -> dict:
        if not self.endpoint_url:
            raise NotImplementedError("Configure PREDICTION_ENDPOINT_URL to enable predictions")
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return _http_json_post(self.endpoint_url, snapshot, headers=headers, timeout=self.timeout)


def get_provider_adapter(provider_code: str | None = None) -> PredictionProviderAdapter:
    code = (provider_code or settings.PREDICTION_PROVIDER or "none").strip().lower()
    if code == "http":
        return HttpPredictionProvider(
            settings.PREDICTION_ENDPOINT_URL,
            api_key=settings.PREDICTION_API_KEY,
            timeout=settings.PREDICTION_TIMEOUT_SECONDS,
        )
    return NoopPredictionProvider()


def _http_json_post(url: str, payload: dict, *, headers: dict[str, str] | None = None, timeout: int = 20) -> dict:
    req_headers = {"Content-Type": "application/json"}
    if headers:
        req_headers.update(headers)
    body = json.dumps(payload).encode("utf-8")
    req = urlrequest.Request(url=url, method="POST", data=body, headers=req_headers)
    with urlrequest.urlopen(req, timeout=timeout) as resp:
        raw = resp.read().decode("utf-8")
    out = json.loads(raw) if raw else {}
    if not isinstance(out, dict):
        raise ValueError("Prediction provider returned a non-object payload")
    return out


def player_summary(player: Player) -> dict:
    wins = player.wins or 0
    losses = player.losses or 0
    return {
        "id": player.id,
        "name": player.name,
        "rank": player.rank,
        "points": player.points,
        "peakPoints": player.peak_points,
        "wins": wins,
        "losses": losses,
        "winRate": round(wins * 100 / (wins + losses)) if (wins + losses) else 0,
        "winStreak": player.win_streak,
        "kills": player.kills,
        "teamChampion": player.team_champion,
        "recentMatches": player.recent_matches or "",
        "isRetired": bool(player.is_retired),
    }


def build_snapshot(player: Player, top_players: list[Player]) -> dict:
    return {
        "player": player_summary(player),
        "topPlayers": [
            {"rank": p.rank, "name": p.name, "points": p.points}
            for p in top_players
        ],
    }


def normalize_prediction(raw: dict, player: Player) -> dict:
    def _list(value) -> list[str]:
        if isinstance(value, list) and value:
            return [str(v) for v in value]
        return ["No data available"]

    try:
        win_probability = float(raw.get("winProbability") or 0.5)
    except (TypeError, ValueError):
        win_probability = 0.5

    return {
        "predictedRank": int(raw.get("predictedRank") or player.rank),
        "predictedPoints": int(raw.get("predictedPoints") or player.points),
        "winProbability": min(1.0, max(0.0, win_probability)),
        "improvementAreas": _list(raw.get("improvementAreas")),
        "strengthAreas": _list(raw.get("strengthAreas")),
        "commentary": str(raw.get("commentary") or "Analysis not available"),
    }


def predict_for_player(player: Player, top_players: list[Player], provider: PredictionProviderAdapter | None = None) -> dict:
    adapter = provider or get_provider_adapter()
    raw = adapter.predict(build_snapshot(player, top_players))
    logger.debug("Prediction from %s for player %s", adapter.provider_code, player.id)
    return normalize_prediction(raw, player)
