from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app, create_app
from services.connection_registry import Connection
from services.relay_hub import RelayHub


@pytest.fixture(autouse=True)
def fresh_hub() -> None:
    """Isolate tests by giving the module-level app an empty hub."""
    app.state.hub = RelayHub()


def test_health() -> None:
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["activeSessions"] == 0
    assert body["uptime"] >= 0


@pytest.mark.anyio
async def test_health_counts_live_sessions() -> None:
    app.state.hub.sessions.create_session(Connection(object()), "world")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.json()["activeSessions"] == 1


def test_cors_allows_any_origin_by_default() -> None:
    client = TestClient(app)
    response = client.get("/health", headers={"Origin": "http://school.example"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_websocket_host_relay_join_and_leave() -> None:
    with TestClient(create_app()) as client:
        with client.websocket_connect("/") as alice:
            assert alice.receive_json() == {"type": "sessionList", "sessions": []}

            alice.send_json({"type": "host", "name": "Alice's World"})
            hosted = alice.receive_json()
            token = hosted["sessionId"]
            assert hosted == {"type": "hosted", "sessionId": token}
            listed = {"type": "sessionList", "sessions": [{"id": token, "name": "Alice's World", "players": 1}]}
            assert alice.receive_json() == listed

            with client.websocket_connect("/ws") as bob:
                assert bob.receive_json() == listed

                bob.send_json({"type": "join_relay", "sessionId": token, "playerId": "b1"})
                updated = {"type": "sessionList", "sessions": [{"id": token, "name": "Alice's World", "players": 2}]}
                assert bob.receive_json() == updated
                assert alice.receive_json() == updated
                assert alice.receive_json() == {"type": "relay_joined", "playerId": "b1"}

                bob.send_json({"type": "relay_position", "sessionId": token, "playerId": "b1", "position": [1, 2, 3]})
                assert alice.receive_json() == {"type": "relay_position", "playerId": "b1", "position": [1, 2, 3]}

                assert client.get("/health").json()["activeSessions"] == 1

            assert alice.receive_json() == listed


def test_websocket_host_disconnect_drops_session() -> None:
    with TestClient(create_app()) as client:
        with client.websocket_connect("/") as watcher:
            watcher.receive_json()
            with client.websocket_connect("/") as host:
                host.receive_json()
                host.send_json({"type": "host", "name": "short-lived"})
                host.receive_json()
                assert len(watcher.receive_json()["sessions"]) == 1

            assert watcher.receive_json() == {"type": "sessionList", "sessions": []}
            assert client.get("/health").json()["activeSessions"] == 0


def test_websocket_survives_malformed_frames() -> None:
    with TestClient(create_app()) as client:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_text("{definitely not json")
            ws.send_text("[" * 100000)
            ws.send_json({"type": "unknown"})
            ws.send_json({"type": "host"})
            ws.send_json({"type": "host", "name": "still here"})
            assert ws.receive_json()["type"] == "hosted"


def test_static_files_served_alongside_hub(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<h1>Craft&amp;Mine</h1>")
    with TestClient(create_app(static_dir=tmp_path)) as client:
        page = client.get("/")
        assert page.status_code == 200
        assert "Craft&amp;Mine" in page.text
        assert client.get("/health").json()["status"] == "ok"
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "sessionList"
