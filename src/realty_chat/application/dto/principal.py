from __future__ import annotations

from dataclasses import dataclass

from realty_chat.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: int
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_act_as(self, user_id: int) -> bool:
        return self.is_admin or self.user_id == user_id
