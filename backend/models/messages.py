"""Wire models for the relay hub websocket protocol.

Every frame is a UTF-8 JSON object with a ``type`` discriminant. Inbound frames
are validated into one model per message type; anything missing a required
field is rejected here, before it reaches the router.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from services.errors import MalformedMessageError, UnknownMessageTypeError


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# --- inbound (client -> hub) ---


class HostMessage(_WireModel):
    type: Literal["host"]
    name: str


class JoinMessage(_WireModel):
    type: Literal["join"]
    session_id: str = Field(alias="sessionId")
    peer_id: str = Field(alias="peerId")
    name: str


class JoinRelayMessage(_WireModel):
    type: Literal["join_relay"]
    session_id: str = Field(alias="sessionId")
    player_id: str | None = Field(default=None, alias="playerId")


class LeaveRelayMessage(_WireModel):
    type: Literal["leave_relay"]
    session_id: str = Field(alias="sessionId")


class RelayPositionMessage(_WireModel):
    type: Literal["relay_position"]
    session_id: str = Field(alias="sessionId")
    player_id: str = Field(alias="playerId")
    position: Any


class RelayBlockMessage(_WireModel):
    type: Literal["relay_block"]
    session_id: str = Field(alias="sessionId")
    player_id: str = Field(alias="playerId")
    x: Any
    y: Any
    z: Any
    action: Any


class SignalingMessage(_WireModel):
    """WebRTC offer/answer/ice. Only the routing fields are modelled; the
    payload itself is forwarded as the raw frame."""

    type: Literal["offer", "answer", "ice"]
    session_id: str = Field(alias="sessionId")
    target: str


InboundMessage = Annotated[
    Union[
        HostMessage,
        JoinMessage,
        JoinRelayMessage,
        LeaveRelayMessage,
        RelayPositionMessage,
        RelayBlockMessage,
        SignalingMessage,
    ],
    Field(discriminator="type"),
]

INBOUND_TYPES = frozenset(
    {"host", "join", "join_relay", "leave_relay", "relay_position", "relay_block", "offer", "answer", "ice"}
)

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: str | bytes) -> InboundMessage:
    """
    Decode one inbound frame.

    Raises MalformedMessageError for invalid JSON, non-object frames and
    frames missing required fields; UnknownMessageTypeError for a ``type``
    outside the protocol.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        raise MalformedMessageError(f"invalid JSON: {type(exc).__name__}") from exc
    if not isinstance(data, dict):
        raise MalformedMessageError(f"expected a JSON object, got {type(data).__name__}")

    message_type = data.get("type")
    if not isinstance(message_type, str) or message_type not in INBOUND_TYPES:
        raise UnknownMessageTypeError(message_type)

    try:
        return _inbound_adapter.validate_python(data)
    except ValidationError as exc:
        raise MalformedMessageError(
            f"{message_type}: {exc.error_count()} validation error(s)"
        ) from exc


# --- outbound (hub -> client) ---


class SessionSummary(_WireModel):
    id: str
    name: str
    players: int


class HostedMessage(_WireModel):
    type: Literal["hosted"] = "hosted"
    session_id: str = Field(alias="sessionId")


class SessionListMessage(_WireModel):
    type: Literal["sessionList"] = "sessionList"
    sessions: list[SessionSummary]


class JoinRequestMessage(_WireModel):
    type: Literal["joinRequest"] = "joinRequest"
    peer_id: str = Field(alias="peerId")
    name: str


class RelayJoinedMessage(_WireModel):
    type: Literal["relay_joined"] = "relay_joined"
    player_id: str = Field(alias="playerId")


class RelayPositionUpdate(_WireModel):
    type: Literal["relay_position"] = "relay_position"
    player_id: str = Field(alias="playerId")
    position: Any


class RelayBlockUpdate(_WireModel):
    type: Literal["relay_block"] = "relay_block"
    player_id: str = Field(alias="playerId")
    x: Any
    y: Any
    z: Any
    action: Any
