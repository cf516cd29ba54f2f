"""Process-local chat state: who is connected, and which thread each user is viewing.

Both maps are plain keyed overwrite/delete tables. All access happens on the
event loop thread and no operation spans an ``await``, so no lock is needed.
"""
from __future__ import annotations

import logging

from realty_chat.application.ports.connection import Connection

logger = logging.getLogger(__name__)


class PresenceDirectory:
    """user id → the connection most recently registered for it."""

    def __init__(self) -> None:
        self._by_user: dict[int, Connection] = {}

    def register(self, user_id: int, connection: Connection) -> Connection | None:
        """Bind user_id to connection. Returns the binding it replaced, if any."""
        previous = self._by_user.get(user_id)
        self._by_user[user_id] = connection
        return previous if previous is not connection else None

    def lookup(self, user_id: int) -> Connection | None:
        return self._by_user.get(user_id)

    def unregister(self, user_id: int, connection: Connection | None = None) -> bool:
        """Drop the binding for user_id.

        When ``connection`` is given the binding is only dropped if it still
        points at that connection, so a stale socket closing cannot evict a
        newer registration of the same user.
        """
        current = self._by_user.get(user_id)
        if current is None:
            return False
        if connection is not None and current is not connection:
            logger.debug("Stale connection for user %s closed; newer binding kept", user_id)
            return False
        del self._by_user[user_id]
        return True

    def is_online(self, user_id: int) -> bool:
        return user_id in self._by_user

    def list_online(self) -> set[int]:
        return set(self._by_user)

    def __len__(self) -> int:
        return len(self._by_user)


class OpenConversationTracker:
    """user id → contact id whose thread is currently on screen."""

    def __init__(self) -> None:
        self._open: dict[int, int] = {}

    def set_open(self, user_id: int, contact_id: int) -> None:
        self._open[user_id] = contact_id

    def clear_open(self, user_id: int) -> None:
        self._open.pop(user_id, None)

    def open_contact(self, user_id: int) -> int | None:
        return self._open.get(user_id)

    def is_open_with(self, user_id: int, contact_id: int) -> bool:
        return self._open.get(user_id) == contact_id
