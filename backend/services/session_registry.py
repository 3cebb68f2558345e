"""In-memory registry of hosted sessions. Keyed by session ID."""

from __future__ import annotations

import logging
import secrets
from typing import Callable

from models.messages import SessionSummary
from models.session import Session
from services.connection_registry import Connection
from services.errors import SessionIdExhaustedError

logger = logging.getLogger(__name__)

# Avoid 0/O, 1/I/l so ids read back correctly when players type them in.
ID_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
SESSION_ID_LENGTH = 8
PLAYER_ID_LENGTH = 7
MAX_ID_ATTEMPTS = 16


def generate_token(length: int) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def _generate_session_id() -> str:
    return generate_token(SESSION_ID_LENGTH)


def _generate_player_id() -> str:
    return generate_token(PLAYER_ID_LENGTH)


class SessionRegistry:
    def __init__(
        self,
        *,
        id_factory: Callable[[], str] | None = None,
        player_id_factory: Callable[[], str] | None = None,
        max_id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._id_factory = id_factory or _generate_session_id
        self._player_id_factory = player_id_factory or _generate_player_id
        self._max_id_attempts = max_id_attempts

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def create_session(self, host: Connection, name: str) -> Session:
        """
        Register a new session owned by ``host``.

        Ids are regenerated on collision; after ``max_id_attempts`` misses
        SessionIdExhaustedError is raised and nothing is stored.
        """
        for _ in range(self._max_id_attempts):
            session_id = self._id_factory()
            if session_id not in self._sessions:
                break
            logger.debug("[sessions] Generated id %s already in use; retrying", session_id)
        else:
            raise SessionIdExhaustedError(
                f"no free session id after {self._max_id_attempts} attempts"
            )

        session = Session(id=session_id, name=name, host=host)
        self._sessions[session_id] = session
        logger.info("[sessions] Session created: session_id=%s name=%r host=%s", session_id, name, host.id)
        return session

    def join_relay(
        self,
        session_id: str,
        connection: Connection,
        player_id: str | None = None,
    ) -> str | None:
        """Add ``connection`` as a relay client. Returns its player id, or None if the session is gone."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug("[sessions] join_relay for unknown session_id=%s dropped", session_id)
            return None
        session.clients.add(connection)
        player_id = player_id or self._player_id_factory()
        logger.info(
            "[sessions] Relay join: session_id=%s conn=%s player_id=%s players=%d",
            session_id,
            connection.id,
            player_id,
            session.players,
        )
        return player_id

    def leave_relay(self, session_id: str, connection: Connection) -> bool:
        session = self._sessions.get(session_id)
        if session is None or connection not in session.clients:
            return False
        session.clients.discard(connection)
        logger.info(
            "[sessions] Relay leave: session_id=%s conn=%s players=%d",
            session_id,
            connection.id,
            session.players,
        )
        return True

    def join_direct(self, session_id: str) -> Connection | None:
        """Host connection a peer-to-peer join request should be forwarded to."""
        session = self._sessions.get(session_id)
        return session.host if session is not None else None

    def remove_session(self, session_id: str) -> Session | None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info(
                "[sessions] Session removed: session_id=%s (orphaned relay clients=%d)",
                session_id,
                len(session.clients),
            )
        return session

    def list_public(self) -> list[SessionSummary]:
        return [session.summary() for session in self._sessions.values()]
