from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from services.broadcast import BroadcastNotifier, Delivery, enqueue_all, flush_all
from services.connection_registry import SEND_TIMEOUT_SECONDS, Connection, ConnectionRegistry
from services.message_router import MessageRouter
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class RelayHub:
    """
    Matchmaking and relay state for one server process.

    - Each connection event is planned under a single asyncio.Lock: registry
      changes, the session list snapshot and the outgoing frames are queued
      on their connections as one step.
    - Queued frames are flushed after the lock is released, in order per
      connection. Sends are best-effort: closed, failing or timed-out
      channels are skipped.
    """

    def __init__(
        self,
        *,
        sessions: SessionRegistry | None = None,
        send_timeout: float = SEND_TIMEOUT_SECONDS,
    ) -> None:
        self._lock = asyncio.Lock()
        self._send_timeout = send_timeout
        self.connections = ConnectionRegistry()
        self.sessions = sessions or SessionRegistry()
        self.notifier = BroadcastNotifier(self.sessions, self.connections)
        self.router = MessageRouter(self.sessions, self.connections, self.notifier)

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    async def connect(self, websocket: Any) -> Connection:
        """Register an accepted websocket and send it the current session list."""
        connection = Connection(websocket, send_timeout=self._send_timeout)
        await self._apply(lambda: self.router.connect(connection))
        return connection

    async def handle_message(self, connection: Connection, raw: str | bytes) -> None:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug("[relay_hub] Discarding non-UTF-8 frame from conn=%s", connection.id)
                return
        text = raw
        await self._apply(lambda: self.router.route(connection, text))

    async def disconnect(self, connection: Connection) -> None:
        await self._apply(lambda: self.router.disconnect(connection))

    async def broadcast_sessions(self) -> None:
        await self._apply(self.notifier.broadcast_deliveries)

    async def _apply(self, plan: Callable[[], list[Delivery]]) -> None:
        async with self._lock:
            recipients = enqueue_all(plan())
        await flush_all(recipients)
