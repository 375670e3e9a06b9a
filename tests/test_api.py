"""End-to-end tests of the HTTP and WebSocket surface via FastAPI's TestClient."""

import json
from pathlib import Path
from typing import Iterator
from urllib.parse import quote

import bcrypt
import pytest
from fastapi.testclient import TestClient

from uasim.config import Settings
from uasim.main import create_app

SEVERITY = "ns=1;s=DEV.MySeverity"
SECRET = "ns=1;s=DEV.MySecretVar"
MY_VAR = "ns=1;s=DEV.MyVar"
SPINDLE = "ns=3;i=55238"

ADMIN = ("admin", "secret")
OBSERVER = ("watcher", "look")


def _path(prefix: str, node_id: str) -> str:
    return f"{prefix}/{quote(node_id, safe='')}"


def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()


@pytest.fixture
def client(tmp_path: Path) -> Iterator[TestClient]:
    user_file = tmp_path / "user.json"
    user_file.write_text(json.dumps({
        "users": [
            {"username": ADMIN[0], "password": _hash(ADMIN[1]), "roles": "ConfigureAdmin;SecurityAdmin"},
            {"username": OBSERVER[0], "password": _hash(OBSERVER[1]), "roles": ["Observer"]},
        ],
    }))
    # Long intervals keep the simulators quiet during a test.
    config = Settings(
        user_file=str(user_file),
        event_interval_seconds=3600,
        ramp_interval_seconds=3600,
        condition_interval_seconds=3600,
        state_toggle_interval_seconds=3600,
        override_interval_seconds=3600,
    )
    with TestClient(create_app(config)) as test_client:
        yield test_client


# ── Health ───────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["running"] is True
        assert body["nodes"] == 17
        assert len(body["jobs"]) == 6
        assert body["active_alarms"] == 0


# ── Variables ────────────────────────────────────────────────────────────────


class TestVariables:
    def test_list_hides_restricted_variables_from_anonymous(self, client: TestClient) -> None:
        ids = {v["node_id"] for v in client.get("/api/variables").json()["variables"]}
        assert SEVERITY in ids
        assert SECRET not in ids

    def test_list_shows_restricted_variables_to_admin(self, client: TestClient) -> None:
        ids = {v["node_id"] for v in client.get("/api/variables", auth=ADMIN).json()["variables"]}
        assert SECRET in ids

    def test_read(self, client: TestClient) -> None:
        response = client.get(_path("/api/variables", SEVERITY))
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Good"
        assert body["data_type"] == "Double"
        assert body["value"] == 100.0

    def test_read_unknown_node(self, client: TestClient) -> None:
        assert client.get(_path("/api/variables", "ns=1;s=Nope")).status_code == 404

    def test_write_in_range(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SEVERITY),
            json={"data_type": "Double", "value": 250},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Good"
        assert client.get(_path("/api/variables", SEVERITY)).json()["value"] == 250.0

    def test_write_out_of_range_keeps_old_value(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SPINDLE),
            json={"data_type": "Double", "value": 59.9},
        )
        assert response.status_code == 422
        assert response.json()["status"] == "BadOutOfRange"
        assert client.get(_path("/api/variables", SPINDLE)).json()["value"] == 100.0

    def test_write_wrong_type(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SEVERITY),
            json={"data_type": "String", "value": "loud"},
        )
        assert response.status_code == 422
        assert response.json()["status"] == "BadTypeMismatch"

    def test_write_uncoercible_value(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SEVERITY),
            json={"data_type": "Double", "value": "not a number"},
        )
        assert response.status_code == 422
        assert response.json()["status"] == "BadTypeMismatch"

    def test_write_int_too_large_for_double(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SEVERITY),
            json={"data_type": "Double", "value": 10 ** 400},
        )
        assert response.status_code == 422
        assert response.json()["status"] == "BadTypeMismatch"
        assert client.get(_path("/api/variables", SEVERITY)).json()["value"] == 100.0

    def test_write_read_only_variable(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", MY_VAR),
            json={"data_type": "Double", "value": 30},
        )
        assert response.status_code == 409
        assert response.json()["status"] == "BadNotWritable"

    def test_observer_cannot_read_restricted(self, client: TestClient) -> None:
        assert client.get(_path("/api/variables", SECRET), auth=OBSERVER).status_code == 403


# ── Permissions ──────────────────────────────────────────────────────────────


class TestRestrictedAccess:
    def test_anonymous_read_denied(self, client: TestClient) -> None:
        response = client.get(_path("/api/variables", SECRET))
        assert response.status_code == 403
        assert response.json()["status"] == "BadUserAccessDenied"

    def test_anonymous_write_denied(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SECRET),
            json={"data_type": "Int32", "value": 42},
        )
        assert response.status_code == 403

    def test_admin_read_and_write(self, client: TestClient) -> None:
        response = client.put(
            _path("/api/variables", SECRET),
            json={"data_type": "Int32", "value": 42},
            auth=ADMIN,
        )
        assert response.status_code == 200
        assert client.get(_path("/api/variables", SECRET), auth=ADMIN).json()["value"] == 42

    def test_bad_credentials(self, client: TestClient) -> None:
        response = client.get("/api/variables", auth=("admin", "wrong"))
        assert response.status_code == 401


# ── History ──────────────────────────────────────────────────────────────────


class TestHistory:
    def test_history_records_writes(self, client: TestClient) -> None:
        for value in (200, 300):
            client.put(_path("/api/variables", SEVERITY), json={"data_type": "Double", "value": value})
        body = client.get(_path("/api/history", SEVERITY)).json()
        assert body["capacity"] == 100
        assert [r["value"] for r in body["records"]] == [200.0, 300.0]

    def test_history_max_values(self, client: TestClient) -> None:
        for value in (200, 300, 400):
            client.put(_path("/api/variables", SEVERITY), json={"data_type": "Double", "value": value})
        body = client.get(_path("/api/history", SEVERITY), params={"max_values": 2}).json()
        assert body["count"] == 2

    def test_history_rejects_negative_max_values(self, client: TestClient) -> None:
        for value in (200, 300, 400):
            client.put(_path("/api/variables", SEVERITY), json={"data_type": "Double", "value": value})
        response = client.get(_path("/api/history", SEVERITY), params={"max_values": -1})
        assert response.status_code == 422

    def test_non_historized_variable(self, client: TestClient) -> None:
        assert client.get(_path("/api/history", MY_VAR)).status_code == 409


# ── Conditions & alarms ──────────────────────────────────────────────────────


class TestConditions:
    def test_conditions(self, client: TestClient) -> None:
        body = client.get("/api/conditions").json()
        assert body["count"] == 1
        assert body["conditions"][0]["state"] == "good"

    def test_alarms(self, client: TestClient) -> None:
        body = client.get("/api/alarms").json()
        assert body["count"] == 1
        assert body["active_count"] == 0


# ── WebSocket ────────────────────────────────────────────────────────────────


class TestEventsSocket:
    def test_ping_pong(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/events") as ws:
            ws.send_text("ping")
            assert ws.receive_text() == "pong"
