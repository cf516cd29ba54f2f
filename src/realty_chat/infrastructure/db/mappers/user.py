from __future__ import annotations

from realty_chat.domain.entities.user import UserProfile
from realty_chat.domain.value_objects.enums import UserRole
from realty_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> UserProfile:
    role = UserRole(model.role) if model.role in UserRole.__members__.values() else UserRole.USER
    return UserProfile(
        id=model.id,
        name=model.name,
        avatar_url=model.avatar_url,
        role=role,
    )
