from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from realty_chat.application.repositories.message import MessageReader, MessageWriter
from realty_chat.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
