"""
verify.py
---------
Purpose:
    Bearer JWT verification against the Supabase JWKS endpoint (ES256).

Notes:
    - The JWKS client is created on first use and caches signing keys.
    - `auth_dependency` returns the decoded claims; routes read the user id
      from the `sub` claim.
"""

from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from app.config import settings
from app.infrastructure.observability.logging import get_logger

SUPABASE_AUDIENCE = "authenticated"
SIGNING_ALGORITHMS = ["ES256"]

logger = get_logger(__name__)
_security = HTTPBearer()


@lru_cache(maxsize=1)
def _jwk_client() -> PyJWKClient:
    return PyJWKClient(settings.jwks_url(), cache_keys=True)


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _jwk_client().get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=SIGNING_ALGORITHMS,
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True, "require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_security)) -> dict:
    return verify_jwt(credentials.credentials)
