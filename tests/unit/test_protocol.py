from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from realty_chat.infrastructure.ws.protocol import (
    ConversationOpenedEvent,
    RegisterUserEvent,
    SendMessageEvent,
    TypingEvent,
    WsOutbound,
    parse_inbound,
)


def test_register_accepts_object_or_bare_id():
    by_object = parse_inbound(json.dumps({"type": "registrar_usuario", "data": {"userId": 7}}))
    bare = parse_inbound(json.dumps({"type": "registrar_usuario", "data": 7}))

    assert isinstance(by_object, RegisterUserEvent)
    assert by_object.data.user_id == bare.data.user_id == 7


def test_conversation_opened_accepts_both_spellings():
    pt = parse_inbound(json.dumps({"type": "conversa_aberta", "data": {"usuarioId": 2, "contatoId": 1}}))
    en = parse_inbound(json.dumps({"type": "conversa_aberta", "data": {"userId": 2, "contactId": 1}}))

    assert isinstance(pt, ConversationOpenedEvent)
    assert (pt.data.user_id, pt.data.contact_id) == (en.data.user_id, en.data.contact_id) == (2, 1)


def test_send_message_payload():
    event = parse_inbound(
        json.dumps({"type": "enviar_mensagem", "data": {"destinatarioId": 2, "conteudo": "Oi"}})
    )

    assert isinstance(event, SendMessageEvent)
    assert event.data.recipient_id == 2
    assert event.data.content == "Oi"


def test_typing_variants_share_a_schema():
    event = parse_inbound(
        json.dumps({"type": "parou_digitando", "data": {"remetenteId": 1, "destinatarioId": 2}})
    )

    assert isinstance(event, TypingEvent)
    assert event.type == "parou_digitando"


@pytest.mark.parametrize(
    "raw",
    [
        json.dumps({"type": "enviar_mensagem", "data": {"conteudo": "Oi"}}),
        json.dumps({"type": "carregar_historico", "data": {"usuarioA": "x", "usuarioB": 2}}),
        json.dumps({"type": "desconhecido", "data": {}}),
        json.dumps({"data": {}}),
        "{",
    ],
)
def test_invalid_frames_are_rejected(raw):
    with pytest.raises(ValidationError):
        parse_inbound(raw)


def test_outbound_frame_shape():
    raw = WsOutbound.frame("user_online", {"userId": 5})

    assert json.loads(raw) == {"type": "user_online", "data": {"userId": 5}}
    assert json.loads(WsOutbound.frame("pong")) == {"type": "pong", "data": {}}
