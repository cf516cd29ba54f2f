from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from realty_chat.domain.entities.user import UserProfile


@dataclass(frozen=True, slots=True)
class Message:
    id: int
    sender_id: int
    recipient_id: int
    content: str
    read: bool
    created_at: datetime
    sender: UserProfile | None = None
    recipient: UserProfile | None = None

    def counterpart_of(self, user_id: int) -> UserProfile | None:
        """Profile of the other party, seen from ``user_id``."""
        return self.recipient if self.sender_id == user_id else self.sender

    def counterpart_id(self, user_id: int) -> int:
        return self.recipient_id if self.sender_id == user_id else self.sender_id
