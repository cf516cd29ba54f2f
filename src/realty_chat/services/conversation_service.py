from __future__ import annotations

from realty_chat.application.dto.conversation import ConversationPreview
from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import NotFoundError
from realty_chat.application.policies.permissions import assert_acts_as
from realty_chat.application.uow import UnitOfWork
from realty_chat.config import settings
from realty_chat.domain.entities.message import Message
from realty_chat.domain.value_objects.enums import UserRole

# Clients talk to brokers and brokers talk to clients
_VISIBLE_ROLES: dict[UserRole, set[UserRole]] = {
    UserRole.USER: {UserRole.CORRETOR},
    UserRole.CORRETOR: {UserRole.USER},
    UserRole.ADMIN: {UserRole.USER, UserRole.CORRETOR, UserRole.ADMIN},
}


async def list_conversations(
    user_id: int,
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationPreview]:
    """Latest message per counterpart of the opposite role, newest first."""
    assert_acts_as(principal, user_id)

    owner = await uow.users.get_by_id(user_id)
    if owner is None:
        raise NotFoundError("Usuário não encontrado.")

    latest: dict[int, Message] = {}
    for msg in await uow.messages.list_involving(user_id):
        other_id = msg.counterpart_id(user_id)
        if other_id == user_id or other_id in latest:
            continue
        latest[other_id] = msg

    profiles = await uow.users.get_many(list(latest))
    visible = _VISIBLE_ROLES.get(owner.role, set())

    previews: list[ConversationPreview] = []
    for other_id, msg in latest.items():
        other = profiles.get(other_id)
        if other is None or other.role not in visible:
            continue
        previews.append(
            ConversationPreview(
                contact_id=other.id,
                name=other.name or "Contato",
                avatar=settings.avatar_for(other.id, other.avatar_url),
                role=other.role,
                last_message=msg.content,
                last_message_at=msg.created_at,
            )
        )
    previews.sort(key=lambda p: p.last_message_at, reverse=True)
    return previews
