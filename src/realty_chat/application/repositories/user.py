from __future__ import annotations

from typing import Protocol

from realty_chat.domain.entities.user import UserProfile


class UserReader(Protocol):
    async def get_by_id(self, user_id: int) -> UserProfile | None: ...

    async def get_many(self, user_ids: list[int]) -> dict[int, UserProfile]: ...
