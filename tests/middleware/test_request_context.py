"""Request id propagation: response header, log records, reset after the
request."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from coursetrack.middleware.request_context import (
    install_request_context_filter,
    request_id_var,
)
from tests.conftest import auth


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    uuid.UUID(resp.headers["x-request-id"])  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "gw-7f3a"})
    assert resp.headers.get("x-request-id") == "gw-7f3a"


@pytest.mark.parametrize(
    ("path", "status"),
    [
        ("/v1/students/me", 401),  # no token
        (f"/v1/enrollments/{uuid.UUID(int=0)}", 404),
    ],
)
def test_request_id_present_on_error_responses(
    client: TestClient, token: str, path: str, status: int
) -> None:
    headers = auth(token) if status == 404 else {}
    resp = client.get(path, headers=headers)
    assert resp.status_code == status
    assert resp.headers.get("x-request-id") is not None


def test_service_logs_carry_request_id(
    client: TestClient, token: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.handler.addFilter(_filter_from_root())
    with caplog.at_level(logging.INFO, logger="coursetrack"):
        client.post("/v1/students/me", headers={**auth(token), "X-Request-ID": "req-42"})

    created = [r for r in caplog.records if r.getMessage().startswith("Student created")]
    assert created
    assert created[0].request_id == "req-42"


def test_request_id_reset_after_request(client: TestClient) -> None:
    client.get("/health", headers={"X-Request-ID": "short-lived"})
    assert request_id_var.get() == "-"


def test_filter_installation_is_idempotent() -> None:
    install_request_context_filter()
    install_request_context_filter()
    root = logging.getLogger()
    names = [type(f).__name__ for f in root.filters]
    assert names.count("_RequestContextFilter") == 1


def _filter_from_root() -> logging.Filter:
    install_request_context_filter()
    return next(
        f for f in logging.getLogger().filters if type(f).__name__ == "_RequestContextFilter"
    )
