"""Seed development data: a client, a broker and a short exchange between them."""
from __future__ import annotations

import asyncio
import logging

from realty_chat.infrastructure.db.base import Base
from realty_chat.infrastructure.db.models.user import UserModel
from realty_chat.infrastructure.db.session import AsyncSessionLocal, dispose, engine
from realty_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

CLIENT_ID = 1
BROKER_ID = 2


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await session.merge(UserModel(id=CLIENT_ID, name="Ana Souza", avatar_url=None, role="USER"))
        await session.merge(UserModel(id=BROKER_ID, name="Carlos Lima", avatar_url=None, role="CORRETOR"))
        await session.flush()

        uow = SqlAlchemyUoW(session)
        messages_data = [
            (CLIENT_ID, BROKER_ID, "Olá! O apartamento da Rua das Flores ainda está disponível?"),
            (BROKER_ID, CLIENT_ID, "Olá, Ana! Está sim. Quer agendar uma visita?"),
            (CLIENT_ID, BROKER_ID, "Quero, pode ser no sábado de manhã?"),
        ]
        for sender_id, recipient_id, content in messages_data:
            await uow.messages_w.create(sender_id, recipient_id, content)

        await uow.commit()
        logger.info("Seeded %d messages between users %s and %s", len(messages_data), CLIENT_ID, BROKER_ID)

    await dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
