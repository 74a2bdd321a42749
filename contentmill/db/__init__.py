"""Database management for Content Mill."""

from .connection import create_pool, open_pool
from .init import init_database, validate_connection
from .postgres import PostgresStore
from .store import TENANT_TIMESTAMP_FIELDS, ContentStore

__all__ = [
    "ContentStore",
    "PostgresStore",
    "TENANT_TIMESTAMP_FIELDS",
    "create_pool",
    "init_database",
    "open_pool",
    "validate_connection",
]
