"""
Auth API routes — signup, signin, me.

Mounted under ``config.auth_prefix`` (empty by default).
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from auth.dependencies import (
    bearer_token,
    get_authentication,
    get_registration,
    get_session_lookup,
)
from auth.service import AuthenticationFlow, RegistrationFlow, SessionLookup

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # declaration order decides which missing field is reported first
    full_name: str = Field(..., alias="fullName")
    username: str
    password: str


class SigninRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str


class ProfileResponse(BaseModel):
    username: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", response_model=TokenResponse)
async def signup(
    req: SignupRequest,
    flow: RegistrationFlow = Depends(get_registration),
) -> Dict[str, Any]:
    """Register a new user and return a token for them."""
    result = await flow.register(req.full_name, req.username, req.password)
    return {"token": result.token}


@router.post("/signin", response_model=TokenResponse)
async def signin(
    req: SigninRequest,
    flow: AuthenticationFlow = Depends(get_authentication),
) -> Dict[str, Any]:
    """Login with username + password."""
    result = await flow.authenticate(req.username, req.password)
    return {"token": result.token}


@router.get("/me", response_model=ProfileResponse)
async def me(
    token: str = Depends(bearer_token),
    lookup: SessionLookup = Depends(get_session_lookup),
) -> Dict[str, Any]:
    profile = await lookup.resolve(token)
    return {"username": profile.username}
