from datetime import datetime, timedelta, timezone

import pytest

from utils.discovery import derive_access_code

BASE = "/api/v1/users"
FROZEN = datetime(2024, 5, 1, 14, 20, tzinfo=timezone.utc)


@pytest.fixture
def alice(login):
    return login["user"]


@pytest.fixture
def gate(app):
    gate = app.extensions["discovery_gate"]
    gate.clock = lambda: FROZEN
    return gate


def test_end_to_end_discovery(client, alice, gate):
    panel = client.get(f"{BASE}/admin-panel")
    assert panel.status_code == 200
    logs = panel.get_json()["data"]["systemLogs"]
    assert logs["debugEndpoint"] == "/system/diagnostics"
    maintenance_code = logs["maintenanceCode"]

    diagnostics = client.get(f"{BASE}/system/diagnostics", query_string={"maintenanceCode": maintenance_code})
    assert diagnostics.status_code == 200
    access_code = diagnostics.get_json()["data"]["internalNotes"]["pattern"]
    assert access_code == f"514{alice['id'][-2:]}"

    secret = client.get(f"{BASE}/secret-key", query_string={"accessCode": access_code})
    assert secret.status_code == 200
    data = secret.get_json()["data"]
    assert data["secretKey"] == "test-final-secret"
    assert len(data["discoveryPath"]) == 5
    assert data["user"]["username"] == "alice"

    wrong = client.get(f"{BASE}/secret-key", query_string={"accessCode": "not-the-code"})
    assert wrong.status_code == 403
    body = wrong.get_json()
    assert body["success"] is False
    assert body["hint"] == "Access codes are time-sensitive and user-specific"


def test_admin_panel_reports_users(client, alice):
    data = client.get(f"{BASE}/admin-panel").get_json()["data"]
    assert data["databaseStats"]["totalUsers"] == 1
    assert data["databaseStats"]["activeUsers"] == 1
    assert data["user"]["username"] == "alice"
    assert data["systemSecrets"]["jwtSecret"] == "***CONFIGURED***"


@pytest.mark.parametrize("query", [{}, {"maintenanceCode": "WRONG"}])
def test_diagnostics_rejects_bad_maintenance_code(client, alice, query):
    response = client.get(f"{BASE}/system/diagnostics", query_string=query)
    assert response.status_code == 403
    body = response.get_json()
    assert body["error"] == "FORBIDDEN"
    assert body["hint"] == "Check system logs for the current maintenance code"


def test_secret_key_requires_access_code(client, alice):
    response = client.get(f"{BASE}/secret-key")
    assert response.status_code == 400
    assert "diagnostics" in response.get_json()["hint"]


def test_secret_key_needs_no_stored_progress(client, alice, gate):
    code = derive_access_code("alice", alice["id"], FROZEN)
    response = client.get(f"{BASE}/secret-key", query_string={"accessCode": code})
    assert response.status_code == 200


def test_secret_key_rejects_code_from_previous_hour(client, alice, gate):
    code = derive_access_code("alice", alice["id"], FROZEN - timedelta(hours=1))
    response = client.get(f"{BASE}/secret-key", query_string={"accessCode": code})
    assert response.status_code == 403


@pytest.mark.parametrize("path", ["admin-panel", "system/diagnostics", "secret-key", "vault-access"])
def test_gated_routes_require_auth(app, path):
    assert app.test_client().get(f"{BASE}/{path}").status_code == 401


def test_vault_access(client, alice):
    response = client.get(f"{BASE}/vault-access")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["securityLevel"] == "MAXIMUM"
    assert data["accessGrantedTo"]["userId"] == alice["id"]
    assert "maintenanceCode" not in str(data)


def test_discovery_routes_share_rate_limit(client, alice):
    for _ in range(10):
        assert client.get(f"{BASE}/admin-panel").status_code == 200
    response = client.get(f"{BASE}/vault-access")
    assert response.status_code == 429
    assert "Retry-After" in response.headers


def test_rate_limit_is_per_user(app, client, alice):
    for _ in range(11):
        client.get(f"{BASE}/admin-panel")

    other = app.test_client()
    other.post(
        f"{BASE}/register",
        json={"username": "bob", "email": "bob@x.com", "fullName": "Bob", "password": "S2"},
    )
    other.post(f"{BASE}/login", json={"usernameOrEmail": "bob", "password": "S2"})
    assert other.get(f"{BASE}/admin-panel").status_code == 200


def test_gated_route_rejects_expired_session(app, client, alice):
    tracker = app.extensions["session_tracker"]
    real_clock = tracker.clock
    tracker.clock = lambda: real_clock() + timedelta(hours=24, minutes=1)
    try:
        response = client.get(f"{BASE}/admin-panel")
    finally:
        tracker.clock = real_clock
    assert response.status_code == 401
    assert client.get(f"{BASE}/admin-panel").status_code == 200


def test_stale_rate_windows_are_dropped_during_traffic(app, client, alice):
    limiter = app.extensions["rate_limiter"]
    long_ago = limiter.clock() - timedelta(hours=2)
    for n in range(500):
        limiter.store.hit(f"rate_limit_10.0.{n // 256}.{n % 256}", long_ago, limiter.window)
    assert len(limiter.store) == 500

    for _ in range(3):
        assert client.get(f"{BASE}/admin-panel").status_code == 200
    assert len(limiter.store) == 1
    assert limiter.store.get(f"rate_limit_{alice['id']}").count == 3
