from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from realty_chat.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class ConversationPreview:
    """One row of a user's conversation list: the other party and the latest message."""

    contact_id: int
    name: str
    avatar: str
    role: UserRole
    last_message: str
    last_message_at: datetime
