"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib

import bcrypt

DEFAULT_ROUNDS = 12


def _encode(password: str) -> bytes:
    """
    SHA-256 then base64 (44 bytes), so every byte of the password reaches
    bcrypt, which ignores or rejects input past 72 bytes.
    """
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        return False


class CredentialHasher:
    """
    bcrypt hashing bound to a work factor.

    The async variants push the bcrypt call onto a worker thread so a
    slow hash never stalls the event loop for other requests.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # compared against when the username is unknown, so the miss costs
        # the same as a wrong password
        self._dummy_hash = hash_password("not-a-real-password", rounds)

    def hash(self, password: str) -> str:
        return hash_password(password, self.rounds)

    def verify(self, password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)

    async def burn_async(self, password: str) -> None:
        """Run a throwaway verification with the dummy hash."""
        await asyncio.to_thread(self.verify, password, self._dummy_hash)
