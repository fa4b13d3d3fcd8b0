from __future__ import annotations

from jose import jwt

from app.core.config import settings
from app.core.security import JWT_ALGORITHM, create_access_token, hash_password
from app.models.user import User
from tests.testkit import ADMIN_PASSWORD, ADMIN_USERNAME


def test_login_and_me(client, admin_headers):
    resp = client.get("/auth/me", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == ADMIN_USERNAME
    assert resp.json()["status"] == "active"


def test_login_rejects_wrong_password(client, admin_headers):
    resp = client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD + "x"})
    assert resp.status_code == 401
    resp = client.post("/auth/login", json={"username": "nobody", "password": "whatever"})
    assert resp.status_code == 401


def test_blocked_admin_cannot_login_or_write(client, session_factory):
    with session_factory() as session:
        user = User(username="blocked", password_hash=hash_password("pw12345"), status="blocked")
        session.add(user)
        session.commit()
        user_id = user.id

    resp = client.post("/auth/login", json={"username": "blocked", "password": "pw12345"})
    assert resp.status_code == 403

    token = create_access_token(str(user_id))
    resp = client.post("/players", json={"name": "x"}, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_unknown_subject_is_401(client):
    token = create_access_token("777")
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_health_and_security_headers(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_token_of_other_type_is_401(client, admin_headers):
    forged = jwt.encode({"sub": "1", "type": "refresh"}, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token type"
