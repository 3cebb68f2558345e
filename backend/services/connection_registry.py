from __future__ import annotations

import asyncio
import logging
import secrets
from collections import deque
from typing import Any

from starlette.websockets import WebSocketState

from models.session import ConnectionInfo, ConnectionRole

logger = logging.getLogger(__name__)

SEND_TIMEOUT_SECONDS = 5.0


class Connection:
    """
    One client websocket as seen by the hub.

    Identity is the object itself; ``id`` is only for logs. The wrapped
    websocket needs ``send_text()`` plus Starlette's ``client_state`` /
    ``application_state``.

    Frames are queued with ``enqueue()`` and written by ``flush()``. Only one
    flush runs per connection at a time, so frames go out in queue order; a
    flush that finds another one in progress leaves its frames to it.
    """

    def __init__(
        self,
        websocket: Any,
        conn_id: str | None = None,
        *,
        send_timeout: float = SEND_TIMEOUT_SECONDS,
    ) -> None:
        self.websocket = websocket
        self.id = conn_id or secrets.token_hex(4)
        self.send_timeout = send_timeout
        self._outbox: deque[str] = deque()
        self._flushing = False

    def __repr__(self) -> str:
        return f"Connection({self.id})"

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def enqueue(self, text: str) -> None:
        self._outbox.append(text)

    async def flush(self) -> int:
        """Send queued frames in order. Returns the number delivered by this call."""
        if self._flushing:
            return 0
        self._flushing = True
        sent = 0
        try:
            while self._outbox:
                if await self.send(self._outbox.popleft()):
                    sent += 1
        finally:
            self._flushing = False
        return sent

    async def send(self, text: str) -> bool:
        """Best-effort send. Returns False when the frame was not delivered."""
        if not self.is_open:
            logger.debug("[connection] Skipping send to closed conn=%s", self.id)
            return False
        try:
            await asyncio.wait_for(self.websocket.send_text(text), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("[connection] send() timed out after %.1fs conn=%s; frame dropped", self.send_timeout, self.id)
            return False
        except Exception as e:  # noqa: BLE001
            logger.warning("[connection] send() failed conn=%s: %s", self.id, e)
            return False
        return True


class ConnectionRegistry:
    """Live connections and the routing attributes the hub tracks for each."""

    def __init__(self) -> None:
        self._connections: dict[Connection, ConnectionInfo] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return connection in self._connections

    def register(self, connection: Connection) -> ConnectionInfo:
        info = self._connections.get(connection)
        if info is None:
            info = self._connections[connection] = ConnectionInfo()
            logger.info("[connections] Registered conn=%s (total=%d)", connection.id, len(self._connections))
        return info

    def unregister(self, connection: Connection) -> ConnectionInfo | None:
        info = self._connections.pop(connection, None)
        if info is not None:
            logger.info(
                "[connections] Unregistered conn=%s role=%s session=%s (total=%d)",
                connection.id,
                info.role.value,
                info.session_id,
                len(self._connections),
            )
        return info

    def get(self, connection: Connection) -> ConnectionInfo | None:
        return self._connections.get(connection)

    def assign_host(self, connection: Connection, session_id: str) -> None:
        info = self.register(connection)
        info.role = ConnectionRole.HOSTING
        info.session_id = session_id
        info.player_id = None

    def assign_relay(self, connection: Connection, session_id: str, player_id: str) -> None:
        info = self.register(connection)
        info.role = ConnectionRole.RELAY_JOINED
        info.session_id = session_id
        info.player_id = player_id

    def clear(self, connection: Connection) -> None:
        info = self._connections.get(connection)
        if info is None:
            return
        info.role = ConnectionRole.CONNECTED
        info.session_id = None
        info.player_id = None

    def open_connections(self) -> list[Connection]:
        return [conn for conn in self._connections if conn.is_open]
