from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ContactSummary:
    """Derived per requesting user; never stored."""

    id: int
    name: str
    avatar: str
    online: bool
    unread: int


@dataclass(frozen=True, slots=True)
class UnreadBySender:
    sender_id: int
    total: int


@dataclass(frozen=True, slots=True)
class AggregateNotification:
    total_contacts: int
    details: list[UnreadBySender]
