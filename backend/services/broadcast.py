from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple

from models.messages import SessionListMessage
from services.connection_registry import Connection, ConnectionRegistry
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class Delivery(NamedTuple):
    connection: Connection
    text: str


def enqueue_all(deliveries: list[Delivery]) -> list[Connection]:
    """Queue each frame on its connection. Returns the recipients, first-seen order."""
    for delivery in deliveries:
        delivery.connection.enqueue(delivery.text)
    return list(dict.fromkeys(delivery.connection for delivery in deliveries))


async def flush_all(connections: list[Connection]) -> int:
    """Flush each recipient concurrently. Returns the total delivered."""
    if not connections:
        return 0
    return sum(await asyncio.gather(*(conn.flush() for conn in connections)))


async def deliver_all(deliveries: list[Delivery]) -> int:
    """Send each frame in order per connection, skipping closed channels. Returns the number delivered."""
    return await flush_all(enqueue_all(deliveries))


class BroadcastNotifier:
    """
    Pushes the public session list to clients.

    The ``*_deliveries`` methods only plan frames, so callers can snapshot
    state atomically and send afterwards.
    """

    def __init__(self, sessions: SessionRegistry, connections: ConnectionRegistry) -> None:
        self._sessions = sessions
        self._connections = connections

    def session_list_frame(self) -> str:
        return SessionListMessage(sessions=self._sessions.list_public()).to_json()

    def broadcast_deliveries(self) -> list[Delivery]:
        frame = self.session_list_frame()
        recipients = self._connections.open_connections()
        logger.debug("[broadcast] sessionList (%d sessions) -> %d connections", len(self._sessions), len(recipients))
        return [Delivery(conn, frame) for conn in recipients]

    def session_list_deliveries(self, connection: Connection) -> list[Delivery]:
        return [Delivery(connection, self.session_list_frame())]

    async def broadcast_sessions(self) -> int:
        return await deliver_all(self.broadcast_deliveries())

    async def send_session_list(self, connection: Connection) -> bool:
        return await deliver_all(self.session_list_deliveries(connection)) == 1
