"""Database bootstrap: schema setup, connection pool and initialization guard."""

from .connection import DatabaseClient
from .initializer import DatabaseInitializer, InitState
from .schema import SQLExecutor, apply_schema, verify_schema

__all__ = [
    "DatabaseClient",
    "DatabaseInitializer",
    "InitState",
    "SQLExecutor",
    "apply_schema",
    "verify_schema",
]
