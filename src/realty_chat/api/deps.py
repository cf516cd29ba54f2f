"""FastAPI dependency injection helpers."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import AuthenticationError
from realty_chat.application.ports.auth import TokenVerifier
from realty_chat.application.uow import UnitOfWork
from realty_chat.config import settings
from realty_chat.infrastructure.auth.verifiers import build_verifier

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Same factory the WebSocket sessions use, so tests swap both at once."""
    async with request.app.state.uow_factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


@lru_cache(maxsize=1)
def get_verifier() -> TokenVerifier:
    return build_verifier(settings)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    if credentials is None:
        raise AuthenticationError("Token não fornecido")
    return await get_verifier().verify(credentials.credentials)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
