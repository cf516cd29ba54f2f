from __future__ import annotations

from typing import Protocol

from realty_chat.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer token into the caller's identity.

    Raises ``AuthenticationError`` for expired, malformed or unsigned tokens.
    """

    async def verify(self, token: str) -> Principal: ...
