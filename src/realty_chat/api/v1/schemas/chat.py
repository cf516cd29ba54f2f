from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from realty_chat.application.dto.conversation import ConversationPreview


class ConversationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    nome: str
    avatar: str
    role: str
    ultima_mensagem: str = Field(alias="ultimaMensagem")
    horario: datetime

    @classmethod
    def from_preview(cls, preview: ConversationPreview) -> ConversationResponse:
        return cls(
            id=preview.contact_id,
            nome=preview.name,
            avatar=preview.avatar,
            role=preview.role.value,
            ultima_mensagem=preview.last_message,
            horario=preview.last_message_at,
        )


class OnlineUsersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[int] = Field(alias="userIds")
