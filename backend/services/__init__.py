from .errors import (
    MalformedMessageError,
    RelayHubError,
    SessionIdExhaustedError,
    UnknownMessageTypeError,
)

__all__ = [
    "RelayHubError",
    "MalformedMessageError",
    "UnknownMessageTypeError",
    "SessionIdExhaustedError",
]
