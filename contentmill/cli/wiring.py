"""Build a coordinator from configuration."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..config import Config
from ..db import PostgresStore, open_pool, validate_connection
from ..errors import ConfigurationError
from ..generation import TemplateLibrary, get_llm_provider
from ..ingestion import FetcherRouter
from ..pipeline import RunCoordinator


@asynccontextmanager
async def open_coordinator(config: Config) -> AsyncIterator[RunCoordinator]:
    """Coordinator backed by a Postgres pool that stays open for the block."""
    llm = get_llm_provider(config)
    fetcher = FetcherRouter.from_config(config)

    async with open_pool(config.get_db_config()) as pool:
        if not await validate_connection(pool):
            raise ConfigurationError("Database connection failed")

        store = PostgresStore(pool)
        yield RunCoordinator(
            store,
            fetcher,
            llm,
            TemplateLibrary(store),
            settings=config.config.pipeline,
        )
