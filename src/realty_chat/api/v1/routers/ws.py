from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from realty_chat.api.deps import get_verifier
from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import AuthenticationError
from realty_chat.config import settings
from realty_chat.infrastructure.ws.manager import ConnectionManager
from realty_chat.infrastructure.ws.protocol import Outbound, WsOutbound
from realty_chat.services.chat_session import ChatSession

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


def get_manager(websocket: WebSocket) -> ConnectionManager:
    return websocket.app.state.chat_manager


async def _authenticate(token: str) -> Principal | None:
    try:
        return await get_verifier().verify(token)
    except AuthenticationError as exc:
        logger.debug("WS auth failed: %s", exc.detail)
        return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    principal: Principal | None = None
    if token is not None or settings.WS_REQUIRE_TOKEN:
        principal = await _authenticate(token or "")
        if principal is None:
            await websocket.close(code=4001, reason="Authentication failed")
            return

    manager = get_manager(websocket)
    await manager.connect(websocket)
    session = ChatSession(
        websocket,
        manager,
        websocket.app.state.uow_factory,
        principal=principal,
    )

    heartbeat_task = asyncio.create_task(_heartbeat(websocket), name="ws-heartbeat")
    try:
        while True:
            raw = await websocket.receive_text()
            await session.handle_frame(raw)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for user %s", session.user_id)
    finally:
        heartbeat_task.cancel()
        await session.close()


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound.frame(Outbound.PONG))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)
