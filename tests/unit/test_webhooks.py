"""
Unit tests for webhook endpoints.
"""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

# Skip tests if fastapi is not installed
pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from branch_guard.api.webhooks import get_github_client, verify_webhook_signature
from branch_guard.config import Settings, get_settings
from branch_guard.errors import RemoteOperationError
from branch_guard.main import app

WEBHOOK_URL = "/webhooks/github/pull-request"
SECRET = "test_secret"


@pytest.fixture
def mock_github_client():
    """Mock GitHub client injected into the endpoint."""
    client = MagicMock()
    client.update_pull_request = AsyncMock(return_value={})
    return client


@pytest.fixture
def client(mock_github_client):
    """Create test client with a known secret and mocked GitHub access."""
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, webhook_secret=SECRET)
    app.dependency_overrides[get_github_client] = lambda: mock_github_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def generate_signature(payload: bytes, secret: str = SECRET) -> str:
    """Generate a GitHub webhook signature header."""
    return "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def make_payload(head="preview/feature-x", base="main", action="opened"):
    return {
        "action": action,
        "number": 12,
        "pull_request": {
            "number": 12,
            "head": {"ref": head},
            "base": {"ref": base},
        },
        "repository": {"name": "app", "owner": {"login": "octo"}},
    }


def post_event(client, payload, event="pull_request", signature=None):
    body = json.dumps(payload).encode()
    return client.post(
        WEBHOOK_URL,
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-GitHub-Event": event,
            "X-Hub-Signature-256": signature or generate_signature(body),
        },
    )


def test_verify_webhook_signature():
    """Signatures must carry the sha256= prefix and match the body."""
    body = b'{"action": "opened"}'

    assert verify_webhook_signature(body, generate_signature(body), SECRET)
    assert not verify_webhook_signature(body, generate_signature(body, "other"), SECRET)
    assert not verify_webhook_signature(body, generate_signature(body)[len("sha256="):], SECRET)
    assert not verify_webhook_signature(body, None, SECRET)


def test_webhook_invalid_signature(client):
    """Test webhook with invalid signature."""
    response = post_event(client, make_payload(), signature="sha256=invalid")

    assert response.status_code == 401
    assert "Invalid webhook signature" in response.json()["detail"]


def test_webhook_signature_skipped_without_secret(mock_github_client):
    """Without a configured secret the signature header is not required."""
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, webhook_secret=None)
    app.dependency_overrides[get_github_client] = lambda: mock_github_client
    try:
        response = TestClient(app).post(
            WEBHOOK_URL,
            json=make_payload(base="staging"),
            headers={"X-GitHub-Event": "pull_request"},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json()["status"] == "no_change"


def test_webhook_base_updated(client, mock_github_client):
    """A preview head targeting main is redirected to develop."""
    response = post_event(client, make_payload())

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "base_updated"
    assert data["result"]["new_base_branch"] == "develop"
    mock_github_client.update_pull_request.assert_awaited_once_with(
        owner="octo", repo="app", pull_number=12, base="develop"
    )


def test_webhook_no_change(client, mock_github_client):
    """A preview head targeting a safe base needs no update."""
    response = post_event(client, make_payload(base="staging"))

    assert response.status_code == 200
    assert response.json()["status"] == "no_change"
    mock_github_client.update_pull_request.assert_not_called()


def test_webhook_policy_violation(client, mock_github_client):
    """Disallowed head branches are rejected with 422."""
    response = post_event(client, make_payload(head="develop"))

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "rejected"
    assert data["result"]["error"]["kind"] == "policy_violation"
    assert "'develop'" in data["message"]
    mock_github_client.update_pull_request.assert_not_called()


def test_webhook_missing_required_fields(client, mock_github_client):
    """Test webhook with missing required fields."""
    payload = make_payload()
    del payload["pull_request"]["base"]

    response = post_event(client, payload)

    assert response.status_code == 400
    assert response.json()["message"] == "The PR is not valid."
    mock_github_client.update_pull_request.assert_not_called()


def test_webhook_remote_failure(client, mock_github_client):
    """A failed update is reported as a bad gateway."""
    mock_github_client.update_pull_request.side_effect = RemoteOperationError(
        "GitHub rejected the pull request update (403): Forbidden", status_code=403
    )

    response = post_event(client, make_payload())

    assert response.status_code == 502
    assert response.json()["result"]["error"]["kind"] == "remote_operation_failure"


def test_webhook_ignores_other_events(client, mock_github_client):
    """Test webhook ignores non pull_request events."""
    response = post_event(client, {"zen": "Keep it logically awesome."}, event="ping")

    assert response.status_code == 200
    assert response.json()["status"] == "ignored"
    mock_github_client.update_pull_request.assert_not_called()


def test_webhook_ignores_unhandled_actions(client, mock_github_client):
    """Closed or labeled pull requests are not checked."""
    response = post_event(client, make_payload(action="closed"))

    assert response.status_code == 200
    assert response.json()["status"] == "ignored"
    mock_github_client.update_pull_request.assert_not_called()


def test_webhook_invalid_json(client):
    """A body that is not JSON is rejected."""
    body = b"not json"
    response = client.post(
        WEBHOOK_URL,
        content=body,
        headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": generate_signature(body)},
    )

    assert response.status_code == 400


def test_webhook_non_integer_number(client, mock_github_client):
    """A boolean pull request number is not coerced to #1."""
    payload = make_payload()
    payload["pull_request"]["number"] = True

    response = post_event(client, payload)

    assert response.status_code == 400
    mock_github_client.update_pull_request.assert_not_called()
