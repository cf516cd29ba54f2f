"""Wire shapes of the chat events' ``data`` field."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from realty_chat.config import settings
from realty_chat.domain.entities.contact import AggregateNotification, ContactSummary
from realty_chat.domain.entities.message import Message
from realty_chat.domain.entities.user import UserProfile


class _Wire(BaseModel):
    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class UserBrief(_Wire):
    id: int
    name: str = Field(serialization_alias="nome")
    avatar_url: str | None = Field(serialization_alias="avatarUrl")

    @classmethod
    def from_profile(cls, profile: UserProfile) -> UserBrief:
        return cls(id=profile.id, name=profile.name, avatar_url=profile.avatar_url)


class MessagePayload(_Wire):
    id: int
    sender_id: int = Field(serialization_alias="remetenteId")
    recipient_id: int = Field(serialization_alias="destinatarioId")
    content: str = Field(serialization_alias="conteudo")
    read: bool = Field(serialization_alias="lida")
    created_at: datetime = Field(serialization_alias="criadoEm")
    sender: UserBrief | None = Field(default=None, serialization_alias="remetente")
    recipient: UserBrief | None = Field(default=None, serialization_alias="destinatario")

    @classmethod
    def from_entity(cls, msg: Message) -> MessagePayload:
        return cls(
            id=msg.id,
            sender_id=msg.sender_id,
            recipient_id=msg.recipient_id,
            content=msg.content,
            read=msg.read,
            created_at=msg.created_at,
            sender=UserBrief.from_profile(msg.sender) if msg.sender else None,
            recipient=UserBrief.from_profile(msg.recipient) if msg.recipient else None,
        )


class ContactPayload(_Wire):
    id: int
    name: str = Field(serialization_alias="nome")
    avatar: str
    online: bool
    unread: int = Field(serialization_alias="naoLidas")

    @classmethod
    def from_summary(cls, contact: ContactSummary) -> ContactPayload:
        return cls(
            id=contact.id,
            name=contact.name,
            avatar=contact.avatar,
            online=contact.online,
            unread=contact.unread,
        )


class UnreadCountPayload(_Wire):
    sender_id: int = Field(serialization_alias="remetenteId")
    total: int


class GlobalNotificationPayload(_Wire):
    total_contacts: int = Field(serialization_alias="totalContatos")
    details: list[UnreadCountPayload] = Field(serialization_alias="detalhes")

    @classmethod
    def from_aggregate(cls, aggregate: AggregateNotification) -> GlobalNotificationPayload:
        return cls(
            total_contacts=aggregate.total_contacts,
            details=[UnreadCountPayload(sender_id=d.sender_id, total=d.total) for d in aggregate.details],
        )


class PopupPayload(_Wire):
    title: str = Field(serialization_alias="titulo")
    content: str = Field(serialization_alias="conteudo")
    sender_name: str | None = Field(serialization_alias="remetente")
    sender_id: int = Field(serialization_alias="remetenteId")
    timestamp: datetime

    @classmethod
    def for_message(cls, msg: Message) -> PopupPayload:
        return cls(
            title=settings.NOTIFICATION_POPUP_TITLE,
            content=msg.content,
            sender_name=msg.sender.name if msg.sender else None,
            sender_id=msg.sender_id,
            timestamp=msg.created_at,
        )


class ListPreviewPayload(_Wire):
    """Conversation-list row update; ``nome``/``avatar`` describe the other party."""

    sender_id: int = Field(serialization_alias="remetenteId")
    recipient_id: int = Field(serialization_alias="destinatarioId")
    content: str = Field(serialization_alias="conteudo")
    created_at: datetime = Field(serialization_alias="criadoEm")
    name: str | None = Field(serialization_alias="nome")
    avatar: str

    @classmethod
    def for_party(cls, msg: Message, user_id: int) -> ListPreviewPayload:
        other_id = msg.counterpart_id(user_id)
        other = msg.counterpart_of(user_id)
        return cls(
            sender_id=msg.sender_id,
            recipient_id=msg.recipient_id,
            content=msg.content,
            created_at=msg.created_at,
            name=other.name if other else None,
            avatar=settings.avatar_for(other_id, other.avatar_url if other else None),
        )


class TypingPayload(_Wire):
    sender_id: int = Field(serialization_alias="remetenteId")


class ErrorPayload(_Wire):
    error: str = Field(serialization_alias="erro")
