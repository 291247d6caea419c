"""
User store — durable user records keyed by unique username.

Uniqueness is decided by the database in a single statement
(``INSERT ... ON CONFLICT DO NOTHING``), so concurrent signups for the
same name cannot both succeed, even across processes.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import User

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class UserRecord:
    username: str
    full_name: str
    password_hash: str


class InsertResult(enum.Enum):
    CREATED = "created"
    CONFLICT = "conflict"


class UserStore:
    """Insert-if-absent and point lookup over the ``users`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert_if_absent(self, record: UserRecord) -> InsertResult:
        values = {
            "username": record.username,
            "full_name": record.full_name,
            "password_hash": record.password_hash,
        }
        async with self._session_factory() as session:
            dialect = session.bind.dialect.name
            dialect_insert = _UPSERT_DIALECTS.get(dialect)

            if dialect_insert is not None:
                stmt = (
                    dialect_insert(User)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["username"])
                    .returning(User.username)
                )
                result = await session.execute(stmt)
                inserted = result.scalar_one_or_none()
                await session.commit()
                return InsertResult.CREATED if inserted is not None else InsertResult.CONFLICT

            try:
                await session.execute(insert(User).values(**values))
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("Unique key rejected username %s", record.username)
                return InsertResult.CONFLICT
            return InsertResult.CREATED

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User).where(User.username == username)
            )
            user = result.scalar_one_or_none()
            if user is None:
                return None
            return UserRecord(
                username=user.username,
                full_name=user.full_name,
                password_hash=user.password_hash,
            )
