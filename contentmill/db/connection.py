"""Database connection management."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


class DatabaseConfig:
    """Database configuration."""

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize database config from dict."""
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "contentmill")
        self.user = config.get("user", "contentmill")
        self.password = config.get("password") or ""
        self.min_size = config.get("min_pool_size", 1)
        self.max_size = config.get("max_pool_size", 10)

    @property
    def connection_string(self) -> str:
        """Get psycopg connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


def create_pool(config: Dict[str, Any]) -> AsyncConnectionPool:
    """Create an unopened async connection pool."""
    db_config = DatabaseConfig(config)
    return AsyncConnectionPool(
        db_config.connection_string,
        min_size=db_config.min_size,
        max_size=db_config.max_size,
        kwargs={"row_factory": dict_row},
        open=False,
    )


@asynccontextmanager
async def open_pool(config: Dict[str, Any]) -> AsyncIterator[AsyncConnectionPool]:
    """Open a pool for the lifetime of the block."""
    pool = create_pool(config)
    await pool.open()
    try:
        yield pool
    finally:
        await pool.close()

