"""
Routes inbound hub frames.

Every handler is synchronous: it mutates the registries and returns the frames
to send, in order. Nothing is sent from here, so a caller holding the hub lock
sees each message applied as one atomic step.
"""

from __future__ import annotations

import logging
from typing import Callable

from pydantic_core import PydanticSerializationError

from models.messages import (
    HostedMessage,
    HostMessage,
    InboundMessage,
    JoinMessage,
    JoinRelayMessage,
    JoinRequestMessage,
    LeaveRelayMessage,
    RelayBlockMessage,
    RelayBlockUpdate,
    RelayJoinedMessage,
    RelayPositionMessage,
    RelayPositionUpdate,
    SignalingMessage,
    parse_inbound,
)
from models.session import ConnectionRole
from services.broadcast import BroadcastNotifier, Delivery
from services.connection_registry import Connection, ConnectionRegistry
from services.errors import MalformedMessageError, SessionIdExhaustedError, UnknownMessageTypeError
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

SIGNALING_TARGET_HOST = "host"

Handler = Callable[[Connection, InboundMessage, str], list[Delivery]]


class MessageRouter:
    def __init__(
        self,
        sessions: SessionRegistry,
        connections: ConnectionRegistry,
        notifier: BroadcastNotifier,
    ) -> None:
        self._sessions = sessions
        self._connections = connections
        self._notifier = notifier
        self._handlers: dict[str, Handler] = {
            "host": self._on_host,
            "join": self._on_join,
            "join_relay": self._on_join_relay,
            "leave_relay": self._on_leave_relay,
            "relay_position": self._on_relay_position,
            "relay_block": self._on_relay_block,
            "offer": self._on_signaling,
            "answer": self._on_signaling,
            "ice": self._on_signaling,
        }

    # --- connection lifecycle ---

    def connect(self, connection: Connection) -> list[Delivery]:
        self._connections.register(connection)
        return self._notifier.session_list_deliveries(connection)

    def disconnect(self, connection: Connection) -> list[Delivery]:
        info = self._connections.unregister(connection)
        if info is None or info.session_id is None:
            return []
        if info.role is ConnectionRole.HOSTING:
            # Relay clients are not told; the session just drops out of the list.
            self._sessions.remove_session(info.session_id)
        elif info.role is ConnectionRole.RELAY_JOINED:
            if not self._sessions.leave_relay(info.session_id, connection):
                return []
        return self._notifier.broadcast_deliveries()

    # --- inbound frames ---

    def route(self, connection: Connection, raw: str) -> list[Delivery]:
        try:
            message = parse_inbound(raw)
        except UnknownMessageTypeError as e:
            logger.debug("[router] Ignoring frame from conn=%s: %s", connection.id, e)
            return []
        except MalformedMessageError as e:
            logger.debug("[router] Discarding malformed frame from conn=%s: %s", connection.id, e)
            return []
        return self._handlers[message.type](connection, message, raw)

    def _on_host(self, connection: Connection, message: HostMessage, raw: str) -> list[Delivery]:
        info = self._connections.register(connection)
        torn_down = False
        if info.role is ConnectionRole.HOSTING and info.session_id is not None:
            torn_down = self._sessions.remove_session(info.session_id) is not None
        elif info.role is ConnectionRole.RELAY_JOINED and info.session_id is not None:
            torn_down = self._sessions.leave_relay(info.session_id, connection)
        self._connections.clear(connection)

        try:
            session = self._sessions.create_session(connection, message.name)
        except SessionIdExhaustedError as e:
            logger.error("[router] host request from conn=%s dropped: %s", connection.id, e)
            return self._notifier.broadcast_deliveries() if torn_down else []

        self._connections.assign_host(connection, session.id)
        hosted = HostedMessage(session_id=session.id).to_json()
        return [Delivery(connection, hosted), *self._notifier.broadcast_deliveries()]

    def _on_join(self, connection: Connection, message: JoinMessage, raw: str) -> list[Delivery]:
        host = self._sessions.join_direct(message.session_id)
        if host is None:
            logger.debug("[router] join for unknown session_id=%s dropped", message.session_id)
            return []
        request = JoinRequestMessage(peer_id=message.peer_id, name=message.name).to_json()
        return [Delivery(host, request)]

    def _on_join_relay(self, connection: Connection, message: JoinRelayMessage, raw: str) -> list[Delivery]:
        info = self._connections.register(connection)
        if info.role is ConnectionRole.HOSTING:
            logger.debug("[router] join_relay from hosting conn=%s dropped", connection.id)
            return []
        session = self._sessions.get(message.session_id)
        if session is None:
            logger.debug("[router] join_relay for unknown session_id=%s dropped", message.session_id)
            return []

        if (
            info.role is ConnectionRole.RELAY_JOINED
            and info.session_id is not None
            and info.session_id != message.session_id
        ):
            self._sessions.leave_relay(info.session_id, connection)

        player_id = self._sessions.join_relay(message.session_id, connection, message.player_id)
        if player_id is None:
            return []
        self._connections.assign_relay(connection, message.session_id, player_id)

        joined = RelayJoinedMessage(player_id=player_id).to_json()
        return [*self._notifier.broadcast_deliveries(), Delivery(session.host, joined)]

    def _on_leave_relay(self, connection: Connection, message: LeaveRelayMessage, raw: str) -> list[Delivery]:
        if not self._sessions.leave_relay(message.session_id, connection):
            return []
        self._connections.clear(connection)
        return self._notifier.broadcast_deliveries()

    def _on_relay_position(self, connection: Connection, message: RelayPositionMessage, raw: str) -> list[Delivery]:
        update = RelayPositionUpdate(player_id=message.player_id, position=message.position)
        return self._fan_out(connection, message.session_id, update)

    def _on_relay_block(self, connection: Connection, message: RelayBlockMessage, raw: str) -> list[Delivery]:
        update = RelayBlockUpdate(
            player_id=message.player_id,
            x=message.x,
            y=message.y,
            z=message.z,
            action=message.action,
        )
        return self._fan_out(connection, message.session_id, update)

    def _fan_out(self, sender: Connection, session_id: str, update: RelayPositionUpdate | RelayBlockUpdate) -> list[Delivery]:
        session = self._sessions.get(session_id)
        if session is None:
            return []
        try:
            frame = update.to_json()
        except PydanticSerializationError as e:
            # Nested past the serializer depth limit.
            logger.debug("[router] Discarding %s from conn=%s: %s", update.type, sender.id, e)
            return []
        return [Delivery(member, frame) for member in session.members() if member is not sender]

    def _on_signaling(self, connection: Connection, message: SignalingMessage, raw: str) -> list[Delivery]:
        if message.target != SIGNALING_TARGET_HOST:
            return []
        host = self._sessions.join_direct(message.session_id)
        if host is None:
            return []
        # Forward the client's frame untouched.
        return [Delivery(host, raw)]
