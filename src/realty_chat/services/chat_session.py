"""Per-connection chat protocol.

A session starts UNREGISTERED, becomes REGISTERED once the client names its
user id, and ends DISCONNECTED when the socket closes. Each inbound frame is
handled to completion; frames from other connections may interleave at the
awaited storage calls, which is why every pushed counter is re-queried.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError as PayloadError

from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import ForbiddenError, ValidationError
from realty_chat.application.ports.connection import Connection
from realty_chat.application.uow import UnitOfWork, UoWFactory
from realty_chat.domain.entities.message import Message
from realty_chat.domain.value_objects.enums import SessionState
from realty_chat.infrastructure.ws.manager import ConnectionManager
from realty_chat.infrastructure.ws.payloads import (
    ErrorPayload,
    ListPreviewPayload,
    MessagePayload,
    PopupPayload,
    TypingPayload,
)
from realty_chat.infrastructure.ws.protocol import (
    ConversationClosedEvent,
    ConversationOpenedEvent,
    GetOnlineUsersEvent,
    Inbound,
    InboundEvent,
    ListContactsEvent,
    LoadHistoryEvent,
    Outbound,
    PingEvent,
    RegisterUserEvent,
    SendMessageEvent,
    TypingEvent,
    WsEnvelope,
    parse_inbound,
)
from realty_chat.services import message_service, notification_service

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(
        self,
        connection: Connection,
        manager: ConnectionManager,
        uow_factory: UoWFactory,
        principal: Principal | None = None,
    ) -> None:
        self._connection = connection
        self._manager = manager
        self._uow_factory = uow_factory
        self._principal = principal
        self.state = SessionState.UNREGISTERED
        self.user_id: int | None = None

    @property
    def is_registered(self) -> bool:
        return self.state == SessionState.REGISTERED

    async def _reply(self, event: str, data: object = None) -> None:
        await self._manager.send(self._connection, event, data)

    async def _deny(self, action: str, user_id: int) -> bool:
        """True (and an error frame sent) when the token does not cover user_id."""
        if self._principal is None or self._principal.can_act_as(user_id):
            return False
        logger.info("User %s may not %s for user %s", self._principal.user_id, action, user_id)
        await self._reply(Outbound.ERROR, {"code": ForbiddenError.code, "action": action})
        return True

    # -- boundary -----------------------------------------------------------

    async def handle_frame(self, raw: str) -> None:
        """Validate one client frame and dispatch it."""
        try:
            event = parse_inbound(raw)
        except PayloadError:
            await self._reply_invalid(raw)
            return
        await self.handle(event)

    async def _reply_invalid(self, raw: str) -> None:
        try:
            envelope = WsEnvelope.model_validate_json(raw)
        except PayloadError:
            await self._reply(Outbound.ERROR, {"code": "invalid_payload"})
            return
        if envelope.type not in Inbound.__members__.values():
            await self._reply(Outbound.ERROR, {"code": "unknown_type", "type": envelope.type})
        else:
            await self._reply(Outbound.ERROR, {"code": "invalid_payload", "type": envelope.type})

    async def handle(self, event: InboundEvent) -> None:
        if self.state == SessionState.DISCONNECTED:
            return

        if isinstance(event, RegisterUserEvent):
            await self.register(event.data.user_id)
        elif isinstance(event, ConversationOpenedEvent):
            if not await self._deny("open_conversation", event.data.user_id):
                self._manager.open_conversations.set_open(event.data.user_id, event.data.contact_id)
                logger.debug("User %s opened conversation with %s", event.data.user_id, event.data.contact_id)
        elif isinstance(event, ConversationClosedEvent):
            if not await self._deny("close_conversation", event.data.user_id):
                self._manager.open_conversations.clear_open(event.data.user_id)
                logger.debug("User %s closed conversation", event.data.user_id)
        elif isinstance(event, SendMessageEvent):
            await self.send_message(event.data.recipient_id, event.data.content)
        elif isinstance(event, TypingEvent):
            await self.forward_typing(event)
        elif isinstance(event, LoadHistoryEvent):
            await self.load_history(event.data.user_a, event.data.user_b)
        elif isinstance(event, ListContactsEvent):
            await self.list_contacts(event.data.user_id)
        elif isinstance(event, GetOnlineUsersEvent):
            await self._reply(Outbound.ONLINE_USERS, sorted(self._manager.presence.list_online()))
        elif isinstance(event, PingEvent):
            await self._reply(Outbound.PONG)

    # -- intents ------------------------------------------------------------

    async def register(self, user_id: int) -> None:
        if await self._deny("register", user_id):
            return
        if self.user_id is not None and self.user_id != user_id:
            await self._manager.unregister(self.user_id, self._connection)

        self.user_id = user_id
        self.state = SessionState.REGISTERED
        await self._manager.register(user_id, self._connection)
        logger.info("User %s registered", user_id)

        try:
            async with self._uow_factory() as uow:
                await notification_service.push_pending_unread(
                    self._manager, uow, user_id, self._connection,
                )
                await notification_service.push_aggregate(self._manager, uow, user_id)
        except Exception:
            logger.exception("Failed to push pending notifications to user %s", user_id)

    async def send_message(self, recipient_id: int, content: str | None) -> None:
        if not self.is_registered or self.user_id is None:
            await self._reply(Outbound.MESSAGE_ERROR, ErrorPayload(error="Usuário não registrado.").dump())
            return
        sender_id = self.user_id

        try:
            async with self._uow_factory() as uow:
                try:
                    msg = await message_service.send_message(sender_id, recipient_id, content, uow)
                except ValidationError as exc:
                    await self._reply(Outbound.MESSAGE_ERROR, ErrorPayload(error=exc.detail).dump())
                    return
                await self._fan_out(msg, uow)
        except Exception:
            logger.exception("Failed to send message %s -> %s", sender_id, recipient_id)

    async def _fan_out(self, msg: Message, uow: UnitOfWork) -> None:
        manager = self._manager
        sender_id, recipient_id = msg.sender_id, msg.recipient_id
        parties = [sender_id] if sender_id == recipient_id else [sender_id, recipient_id]

        full = MessagePayload.from_entity(msg).dump()
        for party in parties:
            await manager.send_to_user(party, Outbound.NEW_MESSAGE, full)

        if manager.is_online(recipient_id):
            await notification_service.push_unread_count(manager, uow, recipient_id, sender_id)
            await notification_service.push_aggregate(manager, uow, recipient_id)
            await notification_service.push_contacts(manager, uow, recipient_id)
            if not manager.open_conversations.is_open_with(recipient_id, sender_id):
                await manager.send_to_user(
                    recipient_id, Outbound.MESSAGE_POPUP, PopupPayload.for_message(msg).dump(),
                )
        else:
            logger.info("User %s offline. Message %s stored.", recipient_id, msg.id)

        for party in parties:
            await manager.send_to_user(
                party, Outbound.LIST_PREVIEW, ListPreviewPayload.for_party(msg, party).dump(),
            )

    async def forward_typing(self, event: TypingEvent) -> None:
        if await self._deny("typing", event.data.sender_id):
            return
        kind = Outbound.TYPING if event.type == Inbound.TYPING else Outbound.STOPPED_TYPING
        # Typing state is never queued for offline users
        await self._manager.send_to_user(
            event.data.recipient_id, kind, TypingPayload(sender_id=event.data.sender_id).dump(),
        )

    async def load_history(self, user_a: int, user_b: int) -> None:
        """user_a reads the thread with user_b."""
        if await self._deny("load_history", user_a):
            return
        try:
            async with self._uow_factory() as uow:
                messages, _marked = await message_service.load_history(user_a, user_b, uow)
                await notification_service.push_aggregate(self._manager, uow, user_a)
                await notification_service.push_unread_count(self._manager, uow, user_a, user_b)
        except Exception:
            logger.exception("Failed to load history %s <-> %s", user_a, user_b)
            await self._reply(
                Outbound.HISTORY_ERROR, ErrorPayload(error="Falha ao carregar histórico.").dump(),
            )
            return
        await self._reply(Outbound.HISTORY_LOADED, [MessagePayload.from_entity(m).dump() for m in messages])

    async def list_contacts(self, user_id: int) -> None:
        if await self._deny("list_contacts", user_id):
            return
        try:
            async with self._uow_factory() as uow:
                contacts = await notification_service.list_contacts(self._manager, uow, user_id)
        except Exception:
            logger.exception("Failed to list contacts for user %s", user_id)
            await self._reply(
                Outbound.CONTACTS_ERROR, ErrorPayload(error="Falha ao listar contatos.").dump(),
            )
            return
        await self._reply(Outbound.CONTACTS_UPDATED, notification_service.contacts_payload(contacts))

    # -- teardown -----------------------------------------------------------

    async def close(self) -> None:
        """Release presence and open-conversation state. Safe to call twice."""
        if self.state == SessionState.DISCONNECTED:
            return
        self.state = SessionState.DISCONNECTED
        self._manager.detach(self._connection)
        if self.user_id is None:
            logger.debug("Anonymous connection closed")
            return
        if await self._manager.unregister(self.user_id, self._connection):
            logger.info("User %s disconnected", self.user_id)
