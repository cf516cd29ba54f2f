from __future__ import annotations

from typing import Protocol

from realty_chat.domain.entities.contact import UnreadBySender
from realty_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def count_unread(self, sender_id: int, recipient_id: int) -> int:
        """Unread messages sender → recipient."""
        ...

    async def group_unread_by_sender(self, recipient_id: int) -> list[UnreadBySender]:
        """One row per sender with at least one unread message for recipient."""
        ...

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        """Both directions, oldest first."""
        ...

    async def list_involving(self, user_id: int) -> list[Message]:
        """Every message sent or received by user_id, newest first, with profiles."""
        ...


class MessageWriter(Protocol):
    async def create(self, sender_id: int, recipient_id: int, content: str) -> Message:
        """Insert an unread message and return it with sender/recipient profiles."""
        ...

    async def mark_read(self, sender_id: int, recipient_id: int) -> int:
        """Flag unread sender → recipient messages as read. Returns rows touched."""
        ...
