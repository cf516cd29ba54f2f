from __future__ import annotations

import time

import jwt
import pytest

from realty_chat.application.exceptions import AuthenticationError
from realty_chat.domain.value_objects.enums import UserRole
from realty_chat.infrastructure.auth.verifiers import HS256Verifier, principal_from_claims

SECRET = "unit-secret"


def _token(payload: dict, secret: str = SECRET) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.mark.asyncio
async def test_hs256_reads_id_and_role():
    principal = await HS256Verifier(SECRET).verify(_token({"id": 7, "role": "CORRETOR"}))
    assert principal.user_id == 7
    assert principal.role == UserRole.CORRETOR


@pytest.mark.asyncio
async def test_hs256_wrong_secret_is_invalid():
    with pytest.raises(AuthenticationError) as exc_info:
        await HS256Verifier(SECRET).verify(_token({"id": 7}, secret="other"))
    assert exc_info.value.detail == "Token inválido"


@pytest.mark.asyncio
async def test_hs256_expired_token():
    token = _token({"id": 7, "exp": int(time.time()) - 60})
    with pytest.raises(AuthenticationError) as exc_info:
        await HS256Verifier(SECRET).verify(token)
    assert exc_info.value.detail == "Token expirado"


def test_hs256_requires_secret():
    with pytest.raises(RuntimeError):
        HS256Verifier("")


def test_claims_fall_back_to_sub_and_user_role():
    principal = principal_from_claims({"sub": "12", "role": "whatever"})
    assert principal.user_id == 12
    assert principal.role == UserRole.USER


def test_claims_without_subject_are_rejected():
    with pytest.raises(AuthenticationError):
        principal_from_claims({"role": "ADMIN"})


def test_lowercase_admin_role_is_recognised():
    assert principal_from_claims({"id": 1, "role": "admin"}).is_admin
