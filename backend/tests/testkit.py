from __future__ import annotations

import json
from dataclasses import dataclass
from urllib import error, request

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Adm1n_pytest_pw"


class ApiError(RuntimeError):
    def __init__(self, status_code: int, payload):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"HTTP {status_code}: {payload}")


class ApiClient:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def call(self, method: str, path: str, *, token: str | None = None, body=None, timeout: int = 20):
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        payload = None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if body is not None:
            headers["Content-Type"] = "application/json"
            payload = json.dumps(body).encode("utf-8")

        req = request.Request(url=url, data=payload, headers=headers, method=method.upper())
        try:
            with request.urlopen(req, timeout=timeout) as resp:
                raw = resp.read().decode("utf-8")
                return _parse_payload(raw)
        except error.HTTPError as exc:
            raw = exc.read().decode("utf-8")
            raise ApiError(exc.code, _parse_payload(raw)) from exc


@dataclass
class NameFactory:
    seed: str
    counter: int = 0

    def next_name(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix}_{self.seed}_{self.counter}"


def _parse_payload(raw: str):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def login_admin(api: ApiClient, username: str, password: str) -> str:
    tokens = api.call("POST", "/auth/login", body={"username": username, "password": password})
    token = tokens.get("access_token") if isinstance(tokens, dict) else None
    if not token:
        raise AssertionError("No access_token received.")
    return token


def create_player(api: ApiClient, token: str, *, name: str, points: int = 0, **extra) -> dict:
    body = {"name": name, "points": points}
    body.update(extra)
    return api.call("POST", "/players", token=token, body=body)


def record_match(api: ApiClient, token: str, *, winner: dict, loser: dict, kills: int = 0) -> dict:
    return api.call(
        "POST",
        "/matches",
        token=token,
        body={"winnerId": winner["id"], "loserId": loser["id"], "winnerKills": kills},
    )


def active_ranks(api: ApiClient) -> list[int]:
    listing = api.call("GET", "/players")
    return [p["rank"] for p in listing["active"]]
