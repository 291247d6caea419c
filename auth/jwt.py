"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url(payload)>.<hex hmac-sha256(secret, base64url(payload))>

The payload carries ``username``, ``iat`` and ``exp`` (UNIX seconds).
Secret and lifetime come from ``config.jwt_secret`` /
``config.jwt_expiry_seconds`` via :class:`TokenService`.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Optional

from auth.errors import MissingSecretError


@dataclass(frozen=True)
class TokenClaims:
    username: str
    iat: int
    exp: int


def _sign(secret: str, data: bytes) -> str:
    return hmac.new(secret.encode(), data, hashlib.sha256).hexdigest()


def create_token(
    username: str,
    secret: str,
    expires_in: int,
    now: Optional[float] = None,
) -> str:
    """Create a signed token containing ``username`` and expiry."""
    issued_at = int(time.time() if now is None else now)
    payload = {
        "username": username,
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }
    encoded = urlsafe_b64encode(json.dumps(payload).encode())
    return encoded.decode() + "." + _sign(secret, encoded)


def decode_token(
    token: str,
    secret: str,
    now: Optional[float] = None,
) -> Optional[TokenClaims]:
    """
    Verify ``token`` and return its claims.

    Returns ``None`` for every kind of failure (bad shape, bad signature,
    undecodable payload, missing claims, expired) so callers cannot tell
    them apart.
    """
    parts = token.split(".")
    if len(parts) != 2:
        return None
    encoded, signature = parts
    try:
        expected_sig = _sign(secret, encoded.encode("ascii"))
    except UnicodeEncodeError:
        return None
    if not hmac.compare_digest(signature.encode(), expected_sig.encode()):
        return None

    try:
        payload = json.loads(urlsafe_b64decode(encoded.encode("ascii")))
        claims = TokenClaims(
            username=payload["username"],
            iat=int(payload["iat"]),
            exp=int(payload["exp"]),
        )
    except (binascii.Error, ValueError, KeyError, TypeError):
        return None

    if not isinstance(claims.username, str) or not claims.username:
        return None
    current = time.time() if now is None else now
    if claims.exp <= current:
        return None
    return claims


class TokenService:
    """Issues and verifies tokens with one process-wide secret."""

    def __init__(self, secret: Optional[str], expires_in: int) -> None:
        if not secret:
            raise MissingSecretError(
                "JWT_SECRET is not set; refusing to issue unsigned tokens"
            )
        self._secret = secret
        self.expires_in = expires_in

    def issue(self, username: str) -> str:
        return create_token(username, self._secret, self.expires_in)

    def verify(self, token: str) -> Optional[TokenClaims]:
        return decode_token(token, self._secret)
