from __future__ import annotations

import uuid
from uuid import uuid4

from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "trace-abc-123"})
    assert resp.headers.get("x-request-id") == "trace-abc-123"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get(f"/v1/classes/{uuid4()}/progress")  # no token
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None
