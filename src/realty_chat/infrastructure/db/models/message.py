from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from realty_chat.infrastructure.db.base import Base
from realty_chat.infrastructure.db.models.user import UserModel


class MessageModel(Base):
    __tablename__ = "mensagens"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(
        "remetenteId",
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id: Mapped[int] = mapped_column(
        "destinatarioId",
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column("conteudo", Text, nullable=False)
    read: Mapped[bool] = mapped_column(
        "lida",
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        "criadoEm",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    # relationships
    sender = relationship(UserModel, foreign_keys="MessageModel.sender_id", lazy="noload")
    recipient = relationship(UserModel, foreign_keys="MessageModel.recipient_id", lazy="noload")

    __table_args__ = (
        Index("ix_mensagens_unread", "destinatarioId", "remetenteId", "lida"),
        Index("ix_mensagens_pair_timeline", "remetenteId", "destinatarioId", "criadoEm"),
    )
