"""Shared test fixtures."""
from __future__ import annotations

import json
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator

import pytest

from realty_chat.application.dto.principal import Principal
from realty_chat.domain.entities.contact import UnreadBySender
from realty_chat.domain.entities.message import Message
from realty_chat.domain.entities.user import UserProfile
from realty_chat.domain.value_objects.enums import UserRole
from realty_chat.infrastructure.ws.manager import ConnectionManager
from realty_chat.services.chat_session import ChatSession

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def user_principal() -> Principal:
    return Principal(user_id=1, role=UserRole.USER)


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(user_id=99, role=UserRole.ADMIN)


@dataclass
class FakeUserReader:
    _users: dict[int, UserProfile] = field(default_factory=dict)

    def add(self, user_id: int, name: str, role: UserRole = UserRole.USER, avatar_url: str | None = None) -> UserProfile:
        profile = UserProfile(id=user_id, name=name, avatar_url=avatar_url, role=role)
        self._users[user_id] = profile
        return profile

    async def get_by_id(self, user_id: int) -> UserProfile | None:
        return self._users.get(user_id)

    async def get_many(self, user_ids: list[int]) -> dict[int, UserProfile]:
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}


@dataclass
class FakeMessageReader:
    _users: FakeUserReader
    _messages: list[Message] = field(default_factory=list)
    fail: bool = False

    def _check(self) -> None:
        if self.fail:
            raise RuntimeError("database unavailable")

    def _with_profiles(self, msg: Message) -> Message:
        return Message(
            id=msg.id,
            sender_id=msg.sender_id,
            recipient_id=msg.recipient_id,
            content=msg.content,
            read=msg.read,
            created_at=msg.created_at,
            sender=self._users._users.get(msg.sender_id),
            recipient=self._users._users.get(msg.recipient_id),
        )

    async def count_unread(self, sender_id: int, recipient_id: int) -> int:
        self._check()
        return sum(
            1 for m in self._messages
            if m.sender_id == sender_id and m.recipient_id == recipient_id and not m.read
        )

    async def group_unread_by_sender(self, recipient_id: int) -> list[UnreadBySender]:
        self._check()
        counts: dict[int, int] = {}
        for m in self._messages:
            if m.recipient_id == recipient_id and not m.read:
                counts[m.sender_id] = counts.get(m.sender_id, 0) + 1
        return [UnreadBySender(sender_id=sid, total=n) for sid, n in sorted(counts.items())]

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        self._check()
        pair = {(user_a, user_b), (user_b, user_a)}
        rows = [m for m in self._messages if (m.sender_id, m.recipient_id) in pair]
        return [self._with_profiles(m) for m in sorted(rows, key=lambda m: (m.created_at, m.id))]

    async def list_involving(self, user_id: int) -> list[Message]:
        self._check()
        rows = [m for m in self._messages if user_id in (m.sender_id, m.recipient_id)]
        rows.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        return [self._with_profiles(m) for m in rows]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail: bool = False

    async def create(self, sender_id: int, recipient_id: int, content: str) -> Message:
        if self.fail:
            raise RuntimeError("database unavailable")
        msg = Message(
            id=len(self._reader._messages) + 1,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            read=False,
            created_at=_EPOCH + timedelta(seconds=len(self._reader._messages)),
        )
        self._reader._messages.append(msg)
        return self._reader._with_profiles(msg)

    async def mark_read(self, sender_id: int, recipient_id: int) -> int:
        touched = 0
        for i, m in enumerate(self._reader._messages):
            if m.sender_id == sender_id and m.recipient_id == recipient_id and not m.read:
                self._reader._messages[i] = Message(
                    id=m.id,
                    sender_id=m.sender_id,
                    recipient_id=m.recipient_id,
                    content=m.content,
                    read=True,
                    created_at=m.created_at,
                )
                touched += 1
        return touched


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    messages: FakeMessageReader | None = None
    messages_w: FakeMessageWriter | None = None
    commits: int = 0

    def __post_init__(self) -> None:
        if self.messages is None:
            self.messages = FakeMessageReader(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_message(self, sender_id: int, recipient_id: int, content: str) -> Message:
        """Seed the store directly, outside any event loop."""
        msg = Message(
            id=len(self.messages._messages) + 1,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            read=False,
            created_at=_EPOCH + timedelta(seconds=len(self.messages._messages)),
        )
        self.messages._messages.append(msg)
        return msg

    def unread(self, sender_id: int, recipient_id: int) -> int:
        return sum(
            1 for m in self.messages._messages
            if m.sender_id == sender_id and m.recipient_id == recipient_id and not m.read
        )

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


def fake_uow_factory(uow: FakeUoW):
    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return _factory


class FakeConnection:
    """Captures every frame pushed to it."""

    def __init__(self, name: str = "conn") -> None:
        self.name = name
        self.frames: list[dict[str, Any]] = []
        self.broken = False

    async def send_text(self, data: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.frames.append(json.loads(data))

    def events(self, event_type: str) -> list[Any]:
        return [f["data"] for f in self.frames if f["type"] == event_type]

    def types(self) -> list[str]:
        return [f["type"] for f in self.frames]

    def clear(self) -> None:
        self.frames.clear()

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"


@pytest.fixture
def uow() -> FakeUoW:
    uow = FakeUoW()
    uow.users.add(1, "Ana", UserRole.USER)
    uow.users.add(2, "Carlos", UserRole.CORRETOR, avatar_url="https://cdn.example/carlos.png")
    uow.users.add(3, "Beatriz", UserRole.CORRETOR)
    return uow


@pytest.fixture
def manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def open_session(manager, uow):
    """Build a session bound to a fresh FakeConnection attached to the manager."""

    def _open(name: str = "conn", principal: Principal | None = None) -> tuple[ChatSession, FakeConnection]:
        conn = FakeConnection(name)
        manager.attach(conn)
        return ChatSession(conn, manager, fake_uow_factory(uow), principal=principal), conn

    return _open
