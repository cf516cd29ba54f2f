"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from typing import Any

from realty_chat.application.ports.connection import Connection
from realty_chat.infrastructure.ws.presence import OpenConversationTracker, PresenceDirectory
from realty_chat.infrastructure.ws.protocol import Outbound, WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the chat's process-local state and pushes frames to connections.

    One instance is built per application (see ``app.lifespan``) and handed
    to every chat session, so tests can run against an isolated instance.
    """

    def __init__(
        self,
        presence: PresenceDirectory | None = None,
        open_conversations: OpenConversationTracker | None = None,
    ) -> None:
        self.presence = presence or PresenceDirectory()
        self.open_conversations = open_conversations or OpenConversationTracker()
        self._connections: list[Connection] = []

    async def connect(self, ws: Any) -> None:
        await ws.accept()
        self.attach(ws)

    def attach(self, connection: Connection) -> None:
        if connection not in self._connections:
            self._connections.append(connection)
        logger.debug("WS connected (total=%d)", len(self._connections))

    def detach(self, connection: Connection) -> None:
        if connection in self._connections:
            self._connections.remove(connection)
        logger.debug("WS disconnected (total=%d)", len(self._connections))

    async def register(self, user_id: int, connection: Connection) -> None:
        """Bind user_id to connection and announce it to everyone."""
        replaced = self.presence.register(user_id, connection)
        if replaced is not None:
            logger.info("User %s re-registered from a new connection", user_id)
        await self.broadcast(Outbound.USER_ONLINE, {"userId": user_id})

    async def unregister(self, user_id: int, connection: Connection | None = None) -> bool:
        """Drop user_id's binding and open conversation; announce it if removed."""
        if not self.presence.unregister(user_id, connection):
            return False
        self.open_conversations.clear_open(user_id)
        await self.broadcast(Outbound.USER_OFFLINE, {"userId": user_id})
        return True

    async def send(self, connection: Connection, event: str, data: Any = None) -> bool:
        """Push one frame. A failed send is logged; the connection's own read
        loop ends and runs the disconnect path."""
        try:
            await connection.send_text(WsOutbound.frame(event, data))
        except Exception:
            logger.debug("WS send of %s failed", event, exc_info=True)
            return False
        return True

    async def send_to_user(self, user_id: int, event: str, data: Any = None) -> bool:
        """Push to the user's registered connection. No-op when offline."""
        connection = self.presence.lookup(user_id)
        if connection is None:
            return False
        return await self.send(connection, event, data)

    async def broadcast(self, event: str, data: Any = None) -> None:
        """Send a WS message to every accepted connection."""
        raw = WsOutbound.frame(event, data)
        for connection in list(self._connections):
            try:
                await connection.send_text(raw)
            except Exception:
                logger.debug("WS broadcast of %s failed", event, exc_info=True)

    def is_online(self, user_id: int) -> bool:
        return self.presence.is_online(user_id)
