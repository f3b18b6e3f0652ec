"""User store: identity lookup and usage counters on the `users` table.

The engine is created by the application factory and passed in explicitly,
so tests can point the store at an in-memory SQLite database.
"""
from __future__ import annotations

import logging

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, func, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from synapse.models import Identity, UserStats

logger = logging.getLogger(__name__)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), unique=True, nullable=False),
    Column("password_hash", String(255), nullable=True),
    Column("subscription_tier", String(32), nullable=False, server_default="free"),
    Column("daily_actions_used", Integer, nullable=False, server_default="0"),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)


def normalize_database_url(url: str) -> str:
    """Coerce plain postgres URLs to the asyncpg driver.

    asyncpg takes `ssl=` instead of libpq's `sslmode=`.
    """
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url.replace("sslmode=", "ssl=") if url.startswith("postgresql+asyncpg://") else url


class UserStore:
    """Async access to user rows."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def create_schema(self) -> None:
        """Create the users table if missing (development and tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def add_user(self, email: str, subscription_tier: str = "free") -> int:
        """Insert a user row and return its id (development and tests)."""
        async with self.engine.begin() as conn:
            result = await conn.execute(
                users.insert().values(email=email, subscription_tier=subscription_tier)
            )
            return result.inserted_primary_key[0]

    async def get_identity(self, user_id: int) -> Identity | None:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(users.c.id, users.c.email, users.c.subscription_tier).where(users.c.id == user_id)
            )
            row = result.first()
        if row is None:
            return None
        return Identity(user_id=row.id, subscription_tier=row.subscription_tier, email=row.email)

    async def increment_daily_actions(self, user_id: int) -> None:
        """Atomically add one to the user's daily counter."""
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(users)
                .where(users.c.id == user_id)
                .values(daily_actions_used=users.c.daily_actions_used + 1)
            )
        if result.rowcount == 0:
            raise LookupError(f"No user with id={user_id}")

    async def get_stats(self, user_id: int) -> UserStats | None:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(users.c.daily_actions_used, users.c.subscription_tier).where(users.c.id == user_id)
            )
            row = result.first()
        if row is None:
            return None
        return UserStats(daily_actions_used=row.daily_actions_used, subscription_tier=row.subscription_tier)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_store(database_url: str) -> UserStore:
    """Build a UserStore for the given SQLAlchemy URL. The engine connects lazily."""
    engine = create_async_engine(normalize_database_url(database_url), future=True, echo=False)
    logger.info("User store configured: %s", engine.url.render_as_string(hide_password=True))
    return UserStore(engine)
