from __future__ import annotations

from realty_chat.domain.entities.message import Message
from realty_chat.infrastructure.db.mappers import user as user_mapper
from realty_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    # sender/recipient are noload unless the query asked for them
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        recipient_id=model.recipient_id,
        content=model.content,
        read=model.read,
        created_at=model.created_at,
        sender=user_mapper.model_to_entity(model.sender) if model.sender is not None else None,
        recipient=user_mapper.model_to_entity(model.recipient) if model.recipient is not None else None,
    )
