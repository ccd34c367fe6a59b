"""Tests for bearer authentication and the core endpoints."""

from tolva.app.api.v1.auth_router import create_access_token


def test_me_returns_token_subject(client, auth_headers):
    resp = client.get("/api/v1/auth/me", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"userId": "user-1"}


def test_missing_token(client):
    resp = client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Falta Bearer token"


def test_expired_token(client):
    token = create_access_token("user-1", minutes=-5)
    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "token_expired"


def test_lowercase_scheme_is_accepted(client):
    token = create_access_token("user-1")
    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"bearer {token}"})
    assert resp.status_code == 200


def test_health_endpoints(client):
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/ready").json()["status"] == "ok"
