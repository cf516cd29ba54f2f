"""Derived chat views: unread counters, the global badge and contact lists.

Nothing here is cached. Every value is queried from the message store at
push time, then the open conversation of the viewing user is suppressed.
"""
from __future__ import annotations

import logging

from realty_chat.application.ports.connection import Connection
from realty_chat.application.uow import UnitOfWork
from realty_chat.config import settings
from realty_chat.domain.entities.contact import (
    AggregateNotification,
    ContactSummary,
    UnreadBySender,
)
from realty_chat.infrastructure.ws.manager import ConnectionManager
from realty_chat.infrastructure.ws.payloads import (
    ContactPayload,
    GlobalNotificationPayload,
    UnreadCountPayload,
)
from realty_chat.infrastructure.ws.presence import OpenConversationTracker
from realty_chat.infrastructure.ws.protocol import Outbound

logger = logging.getLogger(__name__)


async def unread_count(
    uow: UnitOfWork,
    tracker: OpenConversationTracker,
    recipient_id: int,
    sender_id: int,
) -> int:
    """Unread sender → recipient, reported as 0 while recipient has that thread open."""
    total = await uow.messages.count_unread(sender_id, recipient_id)
    if tracker.is_open_with(recipient_id, sender_id):
        return 0
    return total


async def pending_unread(
    uow: UnitOfWork,
    tracker: OpenConversationTracker,
    user_id: int,
) -> list[UnreadBySender]:
    grouped = await uow.messages.group_unread_by_sender(user_id)
    opened = tracker.open_contact(user_id)
    if opened is None:
        return grouped
    return [row for row in grouped if row.sender_id != opened]


async def compute_aggregate(
    uow: UnitOfWork,
    tracker: OpenConversationTracker,
    user_id: int,
) -> AggregateNotification:
    details = await pending_unread(uow, tracker, user_id)
    return AggregateNotification(total_contacts=len(details), details=details)


async def push_aggregate(manager: ConnectionManager, uow: UnitOfWork, user_id: int) -> None:
    """Send the global badge to user_id. No-op while the user is offline."""
    if not manager.is_online(user_id):
        return
    try:
        aggregate = await compute_aggregate(uow, manager.open_conversations, user_id)
    except Exception:
        logger.exception("Failed to compute global notification for user %s", user_id)
        return
    await manager.send_to_user(
        user_id,
        Outbound.GLOBAL_NOTIFICATION,
        GlobalNotificationPayload.from_aggregate(aggregate).dump(),
    )


async def push_unread_count(
    manager: ConnectionManager,
    uow: UnitOfWork,
    recipient_id: int,
    sender_id: int,
) -> None:
    if not manager.is_online(recipient_id):
        return
    try:
        total = await unread_count(uow, manager.open_conversations, recipient_id, sender_id)
    except Exception:
        logger.exception("Failed to count unread %s -> %s", sender_id, recipient_id)
        return
    await manager.send_to_user(
        recipient_id,
        Outbound.UNREAD_COUNT,
        UnreadCountPayload(sender_id=sender_id, total=total).dump(),
    )


async def push_pending_unread(
    manager: ConnectionManager,
    uow: UnitOfWork,
    user_id: int,
    connection: Connection,
) -> None:
    """One ``atualizar_nao_lidas`` per sender with unread messages, to a fresh connection."""
    for row in await pending_unread(uow, manager.open_conversations, user_id):
        await manager.send(
            connection,
            Outbound.UNREAD_COUNT,
            UnreadCountPayload(sender_id=row.sender_id, total=row.total).dump(),
        )


async def list_contacts(
    manager: ConnectionManager,
    uow: UnitOfWork,
    user_id: int,
) -> list[ContactSummary]:
    """One summary per distinct counterpart, most recently active first."""
    contacts: dict[int, ContactSummary] = {}
    for msg in await uow.messages.list_involving(user_id):
        other_id = msg.counterpart_id(user_id)
        if other_id in contacts:
            continue
        other = msg.counterpart_of(user_id)
        contacts[other_id] = ContactSummary(
            id=other_id,
            name=other.name if other else "",
            avatar=settings.avatar_for(other_id, other.avatar_url if other else None),
            online=manager.is_online(other_id),
            unread=await unread_count(uow, manager.open_conversations, user_id, other_id),
        )
    return list(contacts.values())


def contacts_payload(contacts: list[ContactSummary]) -> list[dict]:
    return [ContactPayload.from_summary(c).dump() for c in contacts]


async def push_contacts(manager: ConnectionManager, uow: UnitOfWork, user_id: int) -> None:
    """Refresh user_id's contact list. Storage failures are logged, not raised."""
    if not manager.is_online(user_id):
        return
    try:
        contacts = await list_contacts(manager, uow, user_id)
    except Exception:
        logger.exception("Failed to push updated contacts to user %s", user_id)
        return
    await manager.send_to_user(user_id, Outbound.CONTACTS_UPDATED, contacts_payload(contacts))
