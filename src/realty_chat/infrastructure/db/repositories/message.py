from __future__ import annotations

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from realty_chat.domain.entities.contact import UnreadBySender
from realty_chat.domain.entities.message import Message
from realty_chat.infrastructure.db.mappers import message as mapper
from realty_chat.infrastructure.db.models.message import MessageModel

_WITH_PROFILES = (
    selectinload(MessageModel.sender),
    selectinload(MessageModel.recipient),
)


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def count_unread(self, sender_id: int, recipient_id: int) -> int:
        stmt = select(func.count(MessageModel.id)).where(
            MessageModel.sender_id == sender_id,
            MessageModel.recipient_id == recipient_id,
            MessageModel.read.is_(False),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def group_unread_by_sender(self, recipient_id: int) -> list[UnreadBySender]:
        stmt = (
            select(MessageModel.sender_id, func.count(MessageModel.id))
            .where(
                MessageModel.recipient_id == recipient_id,
                MessageModel.read.is_(False),
            )
            .group_by(MessageModel.sender_id)
            .order_by(MessageModel.sender_id)
        )
        result = await self._session.execute(stmt)
        return [UnreadBySender(sender_id=sid, total=int(total)) for sid, total in result.all()]

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .options(*_WITH_PROFILES)
            .where(
                or_(
                    and_(MessageModel.sender_id == user_a, MessageModel.recipient_id == user_b),
                    and_(MessageModel.sender_id == user_b, MessageModel.recipient_id == user_a),
                )
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_involving(self, user_id: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .options(*_WITH_PROFILES)
            .where(or_(MessageModel.sender_id == user_id, MessageModel.recipient_id == user_id))
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, sender_id: int, recipient_id: int, content: str) -> Message:
        model = MessageModel(
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            read=False,
        )
        self._session.add(model)
        await self._session.flush()

        # Reload with both profiles and the server-side timestamp
        stmt = select(MessageModel).options(*_WITH_PROFILES).where(MessageModel.id == model.id)
        result = await self._session.execute(stmt.execution_options(populate_existing=True))
        return mapper.model_to_entity(result.scalar_one())

    async def mark_read(self, sender_id: int, recipient_id: int) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.sender_id == sender_id,
                MessageModel.recipient_id == recipient_id,
                MessageModel.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
