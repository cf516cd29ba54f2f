from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from realty_chat.infrastructure.db import session as db_session

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready once Postgres answers; also reports how many users are online here."""
    try:
        await db_session.ping()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Readiness check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": [f"postgres: {exc}"]},
        )
    online = len(request.app.state.chat_manager.presence)
    return JSONResponse(content={"status": "ready", "online": online})
