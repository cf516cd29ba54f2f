from __future__ import annotations

import logging

from realty_chat.application.exceptions import ValidationError
from realty_chat.application.uow import UnitOfWork
from realty_chat.domain.entities.message import Message

logger = logging.getLogger(__name__)


async def send_message(
    sender_id: int,
    recipient_id: int,
    content: str | None,
    uow: UnitOfWork,
) -> Message:
    """Persist an unread message and commit it.

    The recipient is not checked for existence; the database foreign key is
    the only guard.
    """
    if not content or not content.strip():
        raise ValidationError("Mensagem vazia.")

    msg = await uow.messages_w.create(sender_id, recipient_id, content)
    await uow.commit()
    logger.info("Message %s persisted: %s -> %s", msg.id, sender_id, recipient_id)
    return msg


async def load_history(reader_id: int, other_id: int, uow: UnitOfWork) -> tuple[list[Message], int]:
    """Mark other → reader messages as read and return the pair's history.

    Returns (messages oldest first, number of messages newly marked read).
    """
    marked = await uow.messages_w.mark_read(other_id, reader_id)
    await uow.commit()
    if marked:
        logger.debug("User %s read %d message(s) from %s", reader_id, marked, other_id)
    messages = await uow.messages.list_between(reader_id, other_id)
    return messages, marked


async def list_history(user_a: int, user_b: int, uow: UnitOfWork) -> list[Message]:
    """Pair history, oldest first. Read flags are left untouched."""
    return await uow.messages.list_between(user_a, user_b)
