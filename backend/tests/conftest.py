from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from starlette.websockets import WebSocketState

from services.connection_registry import Connection
from services.relay_hub import RelayHub


class FakeWebSocket:
    """Stands in for a Starlette WebSocket: records frames, can be closed, made to fail or made to stall."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail_sends = False
        self.release: asyncio.Event | None = None
        self.stalled = False

    async def send_text(self, text: str) -> None:
        if self.release is not None:
            self.stalled = True
            await self.release.wait()
        if self.fail_sends:
            raise RuntimeError("connection reset")
        self.sent.append(text)

    def close(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED

    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(text) for text in self.sent]

    def drain(self) -> list[dict[str, Any]]:
        messages = self.messages()
        self.sent.clear()
        return messages


@pytest.fixture
def hub() -> RelayHub:
    return RelayHub()


@pytest.fixture
def open_client(hub: RelayHub) -> Callable[[], Awaitable[tuple[Connection, FakeWebSocket]]]:
    """Connect a fake client to ``hub``; its initial sessionList is drained."""

    async def _open() -> tuple[Connection, FakeWebSocket]:
        ws = FakeWebSocket()
        conn = await hub.connect(ws)
        ws.drain()
        return conn, ws

    return _open


@pytest.fixture
def fake_ws() -> Callable[[], FakeWebSocket]:
    return FakeWebSocket
