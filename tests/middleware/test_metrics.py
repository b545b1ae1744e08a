"""Prometheus metrics middleware and domain counters.

The default registry is global and counters only go up, so every test
asserts on the delta between a reading before and after the action.
"""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth

_DETAIL_ROUTE = "/v1/enrollments/{enrollment_id}"


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_endpoint_label_is_route_template(client: TestClient, token: str) -> None:
    labels = {"method": "GET", "endpoint": _DETAIL_ROUTE, "status_code": "404"}
    before = _get_sample("http_requests_total", labels)

    client.get(f"/v1/enrollments/{uuid.uuid4()}", headers=auth(token))
    client.get(f"/v1/enrollments/{uuid.uuid4()}", headers=auth(token))

    assert _get_sample("http_requests_total", labels) - before == 2


def test_unmatched_paths_share_one_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "unmatched", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/no/such/thing")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_domain_errors_are_counted_by_code(client: TestClient, token: str) -> None:
    labels = {"code": "not_found"}
    before = _get_sample("enrollment_domain_errors_total", labels)
    client.get(f"/v1/enrollments/{uuid.uuid4()}/progress", headers=auth(token))
    assert _get_sample("enrollment_domain_errors_total", labels) - before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "enrollments_created_total" in resp.text
    assert "certificates_issued_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before
