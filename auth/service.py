"""
Auth flows — registration, sign-in and session lookup.

Each flow is built once with the shared store, hasher and token
service and then called concurrently by request handlers.  Expected
failures are raised as :mod:`auth.errors` types; anything else (store
down, bcrypt failure) propagates as a server fault.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.errors import InvalidPassword, InvalidToken, UsernameTaken, ValidationFailed
from auth.jwt import TokenService
from auth.password import CredentialHasher
from auth.store import InsertResult, UserRecord, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    username: str
    token: str


@dataclass(frozen=True)
class PublicProfile:
    username: str


def _require(field: str, value: str) -> None:
    if not value:
        raise ValidationFailed(f"body/{field} must not be empty")


class RegistrationFlow:
    """Received → Hashing → Inserting → Registered | Conflict."""

    def __init__(
        self,
        store: UserStore,
        hasher: CredentialHasher,
        tokens: TokenService,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, full_name: str, username: str, password: str) -> AuthResult:
        """Create the user and sign them in straight away."""
        _require("fullName", full_name)
        _require("username", username)
        _require("password", password)

        password_hash = await self.hasher.hash_async(password)
        outcome = await self.store.insert_if_absent(
            UserRecord(
                username=username,
                full_name=full_name,
                password_hash=password_hash,
            )
        )
        if outcome is InsertResult.CONFLICT:
            logger.info("Signup rejected, username taken: %s", username)
            raise UsernameTaken()

        logger.info("Registered user %s", username)
        return AuthResult(username=username, token=self.tokens.issue(username))


class AuthenticationFlow:
    """
    Received → Lookup → Verifying → Authenticated | InvalidPassword.

    An unknown username is reported exactly like a wrong password, and
    still pays for one bcrypt check, so callers cannot probe which
    accounts exist.
    """

    def __init__(
        self,
        store: UserStore,
        hasher: CredentialHasher,
        tokens: TokenService,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    async def authenticate(self, username: str, password: str) -> AuthResult:
        user = await self.store.find_by_username(username)
        if user is None:
            await self.hasher.burn_async(password)
            logger.warning("Sign-in failed for %s", username)
            raise InvalidPassword()

        if not await self.hasher.verify_async(password, user.password_hash):
            logger.warning("Sign-in failed for %s", username)
            raise InvalidPassword()

        logger.info("Login: %s", username)
        return AuthResult(username=username, token=self.tokens.issue(username))


class SessionLookup:
    """TokenPresented → Resolved | Rejected."""

    def __init__(self, store: UserStore, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    async def resolve(self, token: str) -> PublicProfile:
        claims = self.tokens.verify(token)
        if claims is None:
            raise InvalidToken()

        # the claim alone is not trusted; the account has to still exist
        user = await self.store.find_by_username(claims.username)
        if user is None:
            logger.warning("Token presented for missing user %s", claims.username)
            raise InvalidToken()
        return PublicProfile(username=user.username)
