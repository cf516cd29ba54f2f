from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from realty_chat.api.deps import CurrentPrincipal, UoWDep
from realty_chat.api.v1.schemas.chat import ConversationResponse, OnlineUsersResponse
from realty_chat.application.policies.permissions import assert_conversation_party
from realty_chat.infrastructure.ws.payloads import MessagePayload
from realty_chat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.get(
    "/conversas/{user_id}",
    response_model=list[ConversationResponse],
    response_model_by_alias=True,
)
async def list_conversations(
    user_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    previews = await conversation_service.list_conversations(user_id, principal, uow)
    return [ConversationResponse.from_preview(p) for p in previews]


@router.get("/mensagens/{usuario_a}/{usuario_b}")
async def list_history(
    usuario_a: int,
    usuario_b: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[dict[str, Any]]:
    assert_conversation_party(principal, usuario_a, usuario_b)
    messages = await message_service.list_history(usuario_a, usuario_b, uow)
    return [MessagePayload.from_entity(m).dump() for m in messages]


@router.get("/online", response_model=OnlineUsersResponse, response_model_by_alias=True)
async def online_users(request: Request, _principal: CurrentPrincipal) -> OnlineUsersResponse:
    manager = request.app.state.chat_manager
    return OnlineUsersResponse(user_ids=sorted(manager.presence.list_online()))
