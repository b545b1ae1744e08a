from __future__ import annotations

from fastapi.testclient import TestClient

from coursetrack.db import engine as db


def test_health_reports_checks(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["checks"]["self"] == "ok"
    assert body["checks"]["database"] in ("ok", "not_configured")


def test_ready_when_storage_is_reachable(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_health_degraded_but_alive_when_database_is_down(client: TestClient, monkeypatch) -> None:
    async def _down() -> bool:
        return False

    monkeypatch.setattr(db, "engine", object())
    monkeypatch.setattr(db, "ping", _down)

    health = client.get("/health")
    ready = client.get("/ready")

    assert health.status_code == 200
    assert health.json()["status"] == "degraded"
    assert health.json()["checks"]["database"] == "degraded"
    assert ready.status_code == 503
