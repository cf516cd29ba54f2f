"""JWT verification for the chat's HTTP routes and WebSocket handshake.

Tokens are the ones the marketplace login issues: the user id travels in the
``id`` claim (``sub`` is accepted too) next to an optional ``role``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import jwt
from jwt import PyJWKClient

from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import AuthenticationError
from realty_chat.application.ports.auth import TokenVerifier
from realty_chat.config import Settings
from realty_chat.domain.value_objects.enums import UserRole

logger = logging.getLogger(__name__)

TOKEN_EXPIRED = "Token expirado"
TOKEN_INVALID = "Token inválido"


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    subject = payload.get("id", payload.get("sub"))
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError(TOKEN_INVALID) from None
    if user_id <= 0:
        raise AuthenticationError(TOKEN_INVALID)

    role_raw = str(payload.get("role") or UserRole.USER).upper()
    role = UserRole(role_raw) if role_raw in UserRole.__members__ else UserRole.USER
    return Principal(user_id=user_id, role=role)


def _decode(token: str, key: Any, algorithms: list[str]) -> dict[str, Any]:
    try:
        return jwt.decode(token, key, algorithms=algorithms)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(TOKEN_EXPIRED) from None
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
        raise AuthenticationError(TOKEN_INVALID) from None


class HS256Verifier:
    """Shared-secret tokens, as issued by the marketplace login."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise RuntimeError("JWT_SECRET is not configured")
        self._secret = secret
        self._algorithms = [algorithm]

    async def verify(self, token: str) -> Principal:
        return principal_from_claims(_decode(token, self._secret, self._algorithms))


class JWKSVerifier:
    """Asymmetric tokens checked against a remote key set."""

    def __init__(self, jwks_url: str) -> None:
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> Principal:
        try:
            # PyJWKClient fetches over blocking HTTP
            signing_key = await asyncio.to_thread(self._jwk_client.get_signing_key_from_jwt, token)
        except jwt.PyJWTError as exc:
            logger.debug("No signing key for token: %s", exc)
            raise AuthenticationError(TOKEN_INVALID) from None
        return principal_from_claims(_decode(token, signing_key.key, ["RS256", "ES256"]))


def build_verifier(settings: Settings) -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        if not settings.JWKS_URL:
            raise RuntimeError("JWKS_URL must be set when JWT_VERIFY_MODE=jwks")
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
