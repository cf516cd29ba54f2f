from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from realty_chat.infrastructure.db.base import Base


class UserModel(Base):
    """Read-only mapping of the marketplace users table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    name: Mapped[str] = mapped_column("nome", String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column("avatarUrl", String(500), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="USER")
