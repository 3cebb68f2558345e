from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from .messages import SessionSummary

if TYPE_CHECKING:
    from services.connection_registry import Connection


class ConnectionRole(str, Enum):
    CONNECTED = "connected"
    HOSTING = "hosting"
    RELAY_JOINED = "relay_joined"


@dataclass
class ConnectionInfo:
    """Routing attributes the hub keeps for one live connection."""

    role: ConnectionRole = ConnectionRole.CONNECTED
    session_id: str | None = None          # hosted or relay-joined session
    player_id: str | None = None           # only set in relay mode


@dataclass(eq=False)
class Session:
    id: str
    name: str
    host: Connection                       # fixed for the session's lifetime
    clients: set[Connection] = field(default_factory=set)   # relay members, never the host
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def players(self) -> int:
        return 1 + len(self.clients)

    def members(self) -> list[Connection]:
        return [self.host, *self.clients]

    def summary(self) -> SessionSummary:
        return SessionSummary(id=self.id, name=self.name, players=self.players)
