"""
asyncpg connection pool for the application database.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import asyncpg

from ..config import DatabaseConfig
from ..errors import DependencyFailure


logger = logging.getLogger(__name__)


class DatabaseClient:
    """Lazily connected pool; implements the executor used by schema setup."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> asyncpg.Pool:
        """Establish the connection pool if it does not exist yet."""
        if self.pool is not None:
            return self.pool

        if not self.config.url:
            raise DependencyFailure("POSTGRES_URL environment variable is not set")

        try:
            self.pool = await asyncpg.create_pool(
                self.config.url,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                max_inactive_connection_lifetime=self.config.idle_timeout,
                timeout=self.config.connect_timeout,
                ssl="require" if self.config.ssl_required else None,
            )
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
            logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise DependencyFailure(f"Could not connect to database: {e}") from e

        logger.info(f"Connected to PostgreSQL (pool size {self.config.min_pool_size}-"
                    f"{self.config.max_pool_size}, ssl={self.config.ssl_required})")
        return self.pool

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Disconnected from PostgreSQL")

    async def execute(self, statement: str) -> str:
        pool = await self.connect()
        async with pool.acquire() as conn:
            return await conn.execute(statement)

    async def fetchrow(self, query: str) -> Optional[Dict[str, Any]]:
        pool = await self.connect()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query)
        return dict(row) if row is not None else None
