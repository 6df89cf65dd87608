import json

import pydantic
import pytest
from tornado import httpclient, httpserver, testing

from telemetry_bridge.config import BridgeSettings
from telemetry_bridge.models import MovementRequest, RobotCommandRequest


def test_request_validation_errors():
    with pytest.raises(pydantic.ValidationError):
        MovementRequest(speed=150, direction="forward")
    with pytest.raises(pydantic.ValidationError):
        MovementRequest(speed=10, direction="sideways")
    with pytest.raises(pydantic.ValidationError):
        RobotCommandRequest(cmd_mode=1, arg_n=[1, 2, 3, 4])


def test_settings_from_env():
    settings = BridgeSettings.from_env(
        {
            "PORT": "8080",
            "GRPC_SERVER_HOST": "10.0.0.5",
            "GRPC_OPSTATE_SERVER_PORT": "50061",
            "BROADCAST_INTERVAL_MS": "250",
            "RECONNECT_DELAY_MS": "2000",
        }
    )

    assert settings.port == 8080
    assert settings.target(settings.opstate_port) == "10.0.0.5:50061"
    assert settings.target(settings.robot_state_port) == "10.0.0.5:50053"
    assert settings.broadcast_interval == pytest.approx(0.25)
    assert settings.reconnect_delay == pytest.approx(2.0)
    assert settings.command_period == pytest.approx(0.05)


def test_settings_reject_invalid_values():
    with pytest.raises(pydantic.ValidationError):
        BridgeSettings.from_env({"PORT": "not-a-port"})
    with pytest.raises(pydantic.ValidationError):
        BridgeSettings.from_env({"BROADCAST_INTERVAL_MS": "fast"})
    with pytest.raises(pydantic.ValidationError):
        BridgeSettings.from_env({"RECONNECT_DELAY_MS": "-100"})
    with pytest.raises(pydantic.ValidationError):
        BridgeSettings.from_env({"GRPC_NAV_COMMAND_SERVER_PORT": "70000"})


@pytest.mark.asyncio
async def test_docs_exposes_push_and_request_schemas(bridge):
    import telemetry_bridge.main as main

    app = main.make_app(bridge)
    server = httpserver.HTTPServer(app)
    sock, port = testing.bind_unused_port()
    server.add_socket(sock)

    try:
        client = httpclient.AsyncHTTPClient()
        resp = await client.fetch(f"http://127.0.0.1:{port}/docs")
        body = json.loads(resp.body)

        assert body["websocket_endpoints"] == {"telemetry": "/ws"}
        assert set(["type", "data"]).issubset(body["push_messages"]["BroadcastMessage"]["properties"].keys())
        movement = body["request_schemas"]["MovementRequest"]
        assert "rotate_left" in json.dumps(movement)
        assert body["examples"]["robotstate-update"]["data"] == {"x": 1.0, "y": 2.0, "theta": 0.0}
    finally:
        server.stop()


def test_bridge_from_settings_wires_both_feeds():
    from telemetry_bridge.bridge import Bridge

    bridge = Bridge.from_settings(BridgeSettings(grpc_server_host="robot", command_period=0.1))

    assert set(bridge.supervisors) == {"robotstate", "opstate"}
    assert bridge.supervisors["opstate"].feed.target == "robot:50060"
    assert bridge.supervisors["robotstate"].feed.broadcast_tag == "robotstate-update"
    assert bridge.feed_statuses()["opstate"].state == "idle"
    assert bridge.snapshot() == []
    assert not bridge.multiplexer.running
