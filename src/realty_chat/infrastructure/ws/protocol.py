"""WebSocket message envelope models.

Every frame is ``{"type": <event>, "data": <payload>}``. Inbound frames are a
discriminated union on ``type`` so each event carries a fixed payload schema.
"""
from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class Inbound(StrEnum):
    REGISTER_USER = "registrar_usuario"
    CONVERSATION_OPENED = "conversa_aberta"
    CONVERSATION_CLOSED = "conversa_fechada"
    SEND_MESSAGE = "enviar_mensagem"
    TYPING = "digitando"
    STOPPED_TYPING = "parou_digitando"
    LOAD_HISTORY = "carregar_historico"
    LIST_CONTACTS = "listar_contatos"
    GET_ONLINE_USERS = "get_online_users"
    PING = "ping"


class Outbound(StrEnum):
    NEW_MESSAGE = "nova_mensagem"
    LIST_PREVIEW = "nova_mensagem_lista"
    UNREAD_COUNT = "atualizar_nao_lidas"
    GLOBAL_NOTIFICATION = "atualizar_notificacao_global"
    CONTACTS_UPDATED = "contatos_atualizados"
    MESSAGE_POPUP = "notificacao_mensagem"
    USER_ONLINE = "user_online"
    USER_OFFLINE = "user_offline"
    ONLINE_USERS = "online_users_list"
    HISTORY_LOADED = "historico_carregado"
    TYPING = "usuario_digitando"
    STOPPED_TYPING = "usuario_parou_digitando"
    MESSAGE_ERROR = "erro_mensagem"
    HISTORY_ERROR = "erro_historico"
    CONTACTS_ERROR = "erro_contatos"
    ERROR = "error"
    PONG = "pong"


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserRef(_Payload):
    user_id: int = Field(validation_alias=AliasChoices("userId", "usuarioId", "user_id"))

    @model_validator(mode="before")
    @classmethod
    def _bare_id(cls, value: Any) -> Any:
        # registrar_usuario may carry the id itself instead of an object
        if isinstance(value, int) and not isinstance(value, bool):
            return {"user_id": value}
        return value


class OpenConversation(_Payload):
    user_id: int = Field(validation_alias=AliasChoices("userId", "usuarioId", "user_id"))
    contact_id: int = Field(validation_alias=AliasChoices("contactId", "contatoId", "contact_id"))


class CloseConversation(_Payload):
    user_id: int = Field(validation_alias=AliasChoices("userId", "usuarioId", "user_id"))
    contact_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("contactId", "contatoId", "contact_id"),
    )


class SendMessage(_Payload):
    recipient_id: int = Field(validation_alias=AliasChoices("destinatarioId", "recipient_id"))
    # Blank content is rejected by the session handler, not here
    content: str | None = Field(default=None, validation_alias=AliasChoices("conteudo", "content"))


class Typing(_Payload):
    sender_id: int = Field(validation_alias=AliasChoices("remetenteId", "sender_id"))
    recipient_id: int = Field(validation_alias=AliasChoices("destinatarioId", "recipient_id"))


class HistoryRequest(_Payload):
    user_a: int = Field(validation_alias=AliasChoices("usuarioA", "user_a"))
    user_b: int = Field(validation_alias=AliasChoices("usuarioB", "user_b"))


class RegisterUserEvent(BaseModel):
    type: Literal["registrar_usuario"]
    data: UserRef


class ConversationOpenedEvent(BaseModel):
    type: Literal["conversa_aberta"]
    data: OpenConversation


class ConversationClosedEvent(BaseModel):
    type: Literal["conversa_fechada"]
    data: CloseConversation


class SendMessageEvent(BaseModel):
    type: Literal["enviar_mensagem"]
    data: SendMessage


class TypingEvent(BaseModel):
    type: Literal["digitando", "parou_digitando"]
    data: Typing


class LoadHistoryEvent(BaseModel):
    type: Literal["carregar_historico"]
    data: HistoryRequest


class ListContactsEvent(BaseModel):
    type: Literal["listar_contatos"]
    data: UserRef


class GetOnlineUsersEvent(BaseModel):
    type: Literal["get_online_users"]
    data: dict[str, Any] = {}


class PingEvent(BaseModel):
    type: Literal["ping"]
    data: dict[str, Any] = {}


InboundEvent = Annotated[
    Union[
        RegisterUserEvent,
        ConversationOpenedEvent,
        ConversationClosedEvent,
        SendMessageEvent,
        TypingEvent,
        LoadHistoryEvent,
        ListContactsEvent,
        GetOnlineUsersEvent,
        PingEvent,
    ],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


class WsEnvelope(BaseModel):
    """Loosely-typed frame, used to tell unknown event types from bad payloads."""

    type: str
    data: Any = None


def parse_inbound(raw: str) -> InboundEvent:
    """Validate a client frame. Raises ``pydantic.ValidationError``."""
    return _inbound_adapter.validate_json(raw)


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: Any = None

    @classmethod
    def frame(cls, event: str, data: Any = None) -> str:
        return cls(type=event, data=data if data is not None else {}).model_dump_json()
