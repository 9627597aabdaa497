"""
JWT Verification

This module is responsible for:

1. Verifying bearer tokens issued by the account service.
2. Producing a validated `UserContext` object to downstream routes.

Security Model
--------------
- Tokens are HMAC-signed with `jwt_secret` and must carry `userId` and `exp`.
- `/chats` routes require a token (`get_current_user`).
- `/chat` accepts an optional token (`get_optional_user`): no token means an
  anonymous, in-memory conversation; a bad token is still rejected.
- Token issuance is handled elsewhere; this service only verifies.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings
from .models import UserContext


# ---------------------------------------------------------------------
# Security Schemes
# ---------------------------------------------------------------------

security = HTTPBearer(auto_error=True)
optional_security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class JWTVerificationError(RuntimeError):
    """Raised internally when token verification fails before converting to HTTP errors."""


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

def _validate_jwt_config() -> None:
    if not settings.jwt_secret.get_secret_value():
        raise JWTVerificationError("Missing jwt_secret in configuration.")
    if not settings.jwt_algo:
        raise JWTVerificationError("Missing jwt_algo in configuration.")


def _decode_token(token: str) -> dict:
    """
    Decode and validate a bearer token.

    Raises
    ------
    Various JWT-related exceptions, which the public wrapper handles.
    """
    _validate_jwt_config()

    return jwt.decode(
        token,
        settings.jwt_secret.get_secret_value(),
        algorithms=[settings.jwt_algo],
        options={"require": ["exp", "userId"]},
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> UserContext:
    """
    Verify a raw bearer token and construct a UserContext.

    Raises
    ------
    HTTPException(401) for invalid or expired tokens.
    """
    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired.")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid or malformed token.")
    except JWTVerificationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT verification configuration error.",
        )

    user_id = payload.get("userId")
    if user_id is None or str(user_id) == "":
        raise _unauthorized("Token missing 'userId' claim.")

    return UserContext(
        user_id=str(user_id),
        username=str(payload.get("username") or ""),
    )


# ---------------------------------------------------------------------
# Public Authentication Dependencies
# ---------------------------------------------------------------------

def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(security),
) -> UserContext:
    """Require a valid bearer token."""
    return verify_token(creds.credentials)


def get_optional_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Optional[UserContext]:
    """Return the caller's context, or None for anonymous requests."""
    if creds is None:
        return None
    return verify_token(creds.credentials)
