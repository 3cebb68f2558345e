from .messages import (
    HostedMessage,
    InboundMessage,
    JoinRequestMessage,
    RelayBlockUpdate,
    RelayJoinedMessage,
    RelayPositionUpdate,
    SessionListMessage,
    SessionSummary,
    parse_inbound,
)
from .session import ConnectionInfo, ConnectionRole, Session

__all__ = [
    "Session",
    "ConnectionInfo",
    "ConnectionRole",
    "InboundMessage",
    "parse_inbound",
    "SessionSummary",
    "HostedMessage",
    "SessionListMessage",
    "JoinRequestMessage",
    "RelayJoinedMessage",
    "RelayPositionUpdate",
    "RelayBlockUpdate",
]
