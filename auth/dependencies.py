"""
FastAPI dependencies for authentication.

The flows live on ``app.state`` (built by ``main.create_app``) so every
request shares the same store handle and signing secret.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from auth.errors import InvalidToken
from auth.service import AuthenticationFlow, RegistrationFlow, SessionLookup


def get_registration(request: Request) -> RegistrationFlow:
    return request.app.state.registration


def get_authentication(request: Request) -> AuthenticationFlow:
    return request.app.state.authentication


def get_session_lookup(request: Request) -> SessionLookup:
    return request.app.state.session_lookup


async def bearer_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """Extract the raw token from an ``Authorization: Bearer`` header."""
    if not authorization:
        raise InvalidToken("No Authorization was found in request.headers")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidToken("Format is Authorization: Bearer [token]")
    return token.strip()
