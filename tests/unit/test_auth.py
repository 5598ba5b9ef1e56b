"""
Tests for bearer JWT verification (ES256 via JWKS).
"""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi import HTTPException

from app.auth.verify import SUPABASE_AUDIENCE, verify_jwt

PRIVATE_KEY = ec.generate_private_key(ec.SECP256R1())


def _token(**overrides) -> str:
    claims = {
        "sub": "user-123",
        "aud": SUPABASE_AUDIENCE,
        "exp": int(time.time()) + 300,
    }
    claims.update(overrides)
    return jwt.encode(claims, PRIVATE_KEY, algorithm="ES256")


def _jwk_client_mock():
    client = MagicMock()
    client.get_signing_key_from_jwt.return_value = SimpleNamespace(key=PRIVATE_KEY.public_key())
    return client


def test_valid_token_returns_claims():
    with patch("app.auth.verify._jwk_client", return_value=_jwk_client_mock()):
        claims = verify_jwt(_token())

    assert claims["sub"] == "user-123"


def test_expired_token_is_rejected():
    with patch("app.auth.verify._jwk_client", return_value=_jwk_client_mock()):
        with pytest.raises(HTTPException) as exc_info:
            verify_jwt(_token(exp=int(time.time()) - 10))

    assert exc_info.value.status_code == 401


def test_wrong_audience_is_rejected():
    with patch("app.auth.verify._jwk_client", return_value=_jwk_client_mock()):
        with pytest.raises(HTTPException) as exc_info:
            verify_jwt(_token(aud="anon"))

    assert exc_info.value.status_code == 401
