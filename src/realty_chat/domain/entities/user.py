from __future__ import annotations

from dataclasses import dataclass

from realty_chat.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Public slice of a marketplace user, as shown in chat views."""

    id: int
    name: str
    avatar_url: str | None
    role: UserRole = UserRole.USER
