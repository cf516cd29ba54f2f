from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from realty_chat.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from realty_chat.infrastructure.db.repositories.user import UserReaderRepo
from realty_chat.infrastructure.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


class SqlAlchemyUoW:
    """Message and user repositories sharing one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.users = UserReaderRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()


@asynccontextmanager
async def session_uow() -> AsyncIterator[SqlAlchemyUoW]:
    """One session per chat event or HTTP request; uncommitted work is
    rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        except Exception:
            logger.debug("Rolling back chat unit of work", exc_info=True)
            await uow.rollback()
            raise
