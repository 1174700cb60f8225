"""Tests for the control API server."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from hydractl.actuator.sim import FULLY_OPEN, SimulatedActuator
from hydractl.api.server import create_app
from hydractl.domain.models import DrivingMode

from tests.conftest import VALID_TOKEN


class TestAuthentication:
    def test_missing_header_is_401_with_body(self, api_client: TestClient) -> None:
        resp = api_client.get("/sim/status")
        assert resp.status_code == 401
        assert resp.text == "need Authorization header (exactly 1)"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_wrong_scheme_is_401(self, api_client: TestClient) -> None:
        resp = api_client.get("/sim/status", headers={"Authorization": f"Token {VALID_TOKEN}"})
        assert resp.status_code == 401
        assert "Bearer" in resp.text

    def test_duplicate_header_is_401(self, api_client: TestClient) -> None:
        resp = api_client.get(
            "/sim/status",
            headers=[
                ("Authorization", f"Bearer {VALID_TOKEN}"),
                ("Authorization", f"Bearer {VALID_TOKEN}"),
            ],
        )
        assert resp.status_code == 401

    def test_unknown_token_is_403(self, api_client: TestClient) -> None:
        resp = api_client.get("/sim/status", headers={"Authorization": "Bearer nobody"})
        assert resp.status_code == 403
        assert resp.text == "auth failed"

    def test_auth_checked_before_command(
        self, api_client: TestClient, actuator: SimulatedActuator
    ) -> None:
        resp = api_client.post("/sim/open-to-end", json={"time": "2025-01-01T12:00:00Z"})
        assert resp.status_code == 401
        assert actuator._mode is DrivingMode.NONE


class TestRouting:
    def test_unknown_environment_is_404(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        resp = api_client.get("/prod/status", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.text == "only simulated environment is available at the moment"

    def test_unknown_get_command_is_404(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        resp = api_client.get("/sim/unknown-cmd", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.text == "unknown command GET unknown-cmd"

    def test_get_on_post_command_is_404(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        resp = api_client.get("/sim/open", headers=auth_headers)
        assert resp.status_code == 404

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "OPTIONS"])
    def test_other_methods_are_unimplemented(
        self, api_client: TestClient, auth_headers: dict[str, str], method: str
    ) -> None:
        resp = api_client.request(method, "/sim/status", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.text == f"unknown command {method} status"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_head_is_unimplemented(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        assert api_client.head("/sim/status", headers=auth_headers).status_code == 404

    def test_options_without_auth_is_401(self, api_client: TestClient) -> None:
        resp = api_client.options("/sim/status")
        assert resp.status_code == 401
        assert resp.text == "need Authorization header (exactly 1)"

    def test_route_prefix(
        self, known_tokens: frozenset[str], actuator: SimulatedActuator,
        auth_headers: dict[str, str],
    ) -> None:
        app = create_app(known_tokens, actuator=actuator, route_prefix="/ctl/", start_worker=False)
        client = TestClient(app)
        assert client.get("/ctl/sim/status", headers=auth_headers).status_code == 200
        assert client.get("/sim/status", headers=auth_headers).status_code == 404


class TestStatusEndpoint:
    def test_initial_status(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        resp = api_client.get("/sim/status", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"status": "idle", "position": "closed"}

    def test_error_field_present_when_set(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        resp = api_client.post("/sim/sim-error", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == "ok, configured error"

        data = api_client.get("/sim/status", headers=auth_headers).json()
        assert data["status"] == "error"
        assert data["error"] == "Oh nein, ein Fehler!"

        resp = api_client.post("/sim/sim-no-error", headers=auth_headers)
        assert resp.json() == "ok, configured no error"
        assert "error" not in api_client.get("/sim/status", headers=auth_headers).json()


class TestDrivingCommands:
    @pytest.mark.parametrize(
        ("cmd", "mode"),
        [
            ("open", DrivingMode.OPEN_HOLD),
            ("open-to-end", DrivingMode.OPEN_TO_END),
        ],
    )
    def test_open_commands(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str], time_body: dict[str, str],
        cmd: str, mode: DrivingMode,
    ) -> None:
        resp = api_client.post(f"/sim/{cmd}", headers=auth_headers, json=time_body)
        assert resp.status_code == 200
        assert resp.json() == {"status": "driving", "position": "closed"}
        assert actuator._mode is mode

    @pytest.mark.parametrize(
        ("cmd", "mode"),
        [
            ("close", DrivingMode.CLOSE_HOLD),
            ("close-to-end", DrivingMode.CLOSE_TO_END),
        ],
    )
    def test_close_commands(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str], time_body: dict[str, str],
        cmd: str, mode: DrivingMode,
    ) -> None:
        actuator._position = 30
        resp = api_client.post(f"/sim/{cmd}", headers=auth_headers, json=time_body)
        assert resp.status_code == 200
        assert resp.json() == {"status": "driving", "position": "inbetween"}
        assert actuator._mode is mode

    def test_stop(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str], time_body: dict[str, str],
    ) -> None:
        api_client.post("/sim/open-to-end", headers=auth_headers, json=time_body)
        resp = api_client.post("/sim/stop", headers=auth_headers, json=time_body)
        assert resp.status_code == 200
        assert resp.json()["status"] == "idle"
        assert actuator._mode is DrivingMode.NONE

    def test_open_to_end_eventually_open(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str], time_body: dict[str, str],
    ) -> None:
        resp = api_client.post("/sim/open-to-end", headers=auth_headers, json=time_body)
        assert resp.status_code == 200
        for _ in range(FULLY_OPEN + 1):
            actuator.tick()
        resp = api_client.get("/sim/status", headers=auth_headers)
        assert resp.json() == {"status": "idle", "position": "open"}

    def test_bad_time_is_400(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str],
    ) -> None:
        resp = api_client.post("/sim/open", headers=auth_headers, json={"time": "not-a-date"})
        assert resp.status_code == 400
        assert "can not parse request-given time 'not-a-date'" in resp.text
        assert actuator._mode is DrivingMode.NONE

    def test_time_with_trailing_newline_is_400(
        self, api_client: TestClient, actuator: SimulatedActuator,
        auth_headers: dict[str, str],
    ) -> None:
        resp = api_client.post(
            "/sim/open", headers=auth_headers, json={"time": "2025-01-01T12:00:00Z\n"}
        )
        assert resp.status_code == 400
        assert actuator._mode is DrivingMode.NONE

    def test_malformed_json_is_400(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        resp = api_client.post(
            "/sim/close-to-end",
            headers={**auth_headers, "Content-Type": "application/json"},
            content=b"{oops",
        )
        assert resp.status_code == 400
        assert resp.text.startswith("can not parse request as JSON")


class TestUnclassifiedErrors:
    def test_unexpected_exception_is_500_without_detail(
        self, known_tokens: frozenset[str], auth_headers: dict[str, str]
    ) -> None:
        broken = MagicMock(spec=SimulatedActuator)
        broken.status.side_effect = RuntimeError("secret detail")
        app = create_app(known_tokens, actuator=broken, start_worker=False)
        resp = TestClient(app).get("/sim/status", headers=auth_headers)
        assert resp.status_code == 500
        assert resp.content == b""


class TestLifespan:
    def test_lifespan_starts_and_stops_worker(self, known_tokens: frozenset[str]) -> None:
        sim = SimulatedActuator(tick_interval=0.01)
        app = create_app(known_tokens, actuator=sim)
        with TestClient(app):
            assert sim.is_running
        assert not sim.is_running
