"""Exceptions raised inside the relay hub. None of them reach the client."""

from __future__ import annotations


class RelayHubError(Exception):
    pass


class MalformedMessageError(RelayHubError):
    """Inbound frame is not JSON, not an object, or misses a required field."""


class UnknownMessageTypeError(RelayHubError):
    def __init__(self, message_type: object) -> None:
        super().__init__(f"unknown message type: {message_type!r}")
        self.message_type = message_type


class SessionIdExhaustedError(RelayHubError):
    """Every generated session id collided with a live one."""
