"""
Setup service for the application database.

Exposes the idempotent schema setup and the toolkit health check over HTTP.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import BugX
from .config import BugXConfig
from .db import DatabaseClient, DatabaseInitializer, SQLExecutor, apply_schema, verify_schema
from .errors import DependencyFailure
from .logger import configure_logging


logger = logging.getLogger(__name__)


def create_app(config: Optional[BugXConfig] = None,
               executor: Optional[SQLExecutor] = None,
               bugx: Optional[BugX] = None) -> FastAPI:
    """Build the FastAPI app; a given executor replaces the asyncpg pool."""
    config = config or BugXConfig()
    owned_client = None
    if executor is None:
        owned_client = DatabaseClient(config.database)
        executor = owned_client

    initializer = DatabaseInitializer(
        lambda: apply_schema(executor),
        max_attempts=config.database.max_init_attempts,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("BugX setup service starting")
        yield
        if owned_client is not None:
            await owned_client.close()
        logger.info("BugX setup service stopped")

    app = FastAPI(
        title="BugX Setup Service",
        description="Database setup and toolkit health for BugX",
        version="1.4.0",
        lifespan=lifespan,
    )
    app.state.executor = executor
    app.state.initializer = initializer
    app.state.bugx = bugx or BugX(config=config)

    @app.post("/api/setup-database")
    async def setup_database(request: Request):
        """Create tables and seed the test user."""
        logger.info("Starting database setup")
        try:
            await request.app.state.initializer.ensure_initialized()
            results = await verify_schema(request.app.state.executor)
        except DependencyFailure as e:
            logger.error(f"Database setup failed: {e}")
            return JSONResponse(status_code=500, content={
                "success": False,
                "error": str(e),
                "details": "Check server logs for more information",
            })
        except Exception as e:
            logger.exception(f"Database setup failed: {e}")
            return JSONResponse(status_code=500, content={
                "success": False,
                "error": str(e) or "Unknown error occurred",
                "details": "Check server logs for more information",
            })

        logger.info("Database setup completed successfully")
        return {
            "success": True,
            "message": "Database setup completed successfully",
            "results": results,
        }

    @app.get("/api/setup-database")
    async def setup_instructions():
        return {
            "message": "Database setup endpoint. Use POST to create tables.",
            "instructions": "Send a POST request to this endpoint to set up database tables "
                            "automatically.",
        }

    @app.get("/health")
    async def health_check(request: Request):
        health = request.app.state.bugx.health_check()
        health["database"] = request.app.state.initializer.state.value
        return health

    return app


def main() -> None:
    import uvicorn

    load_dotenv()
    config = BugXConfig()
    config_path = os.getenv("BUGX_CONFIG")
    if config_path:
        config = BugXConfig.from_file(config_path)

    issues = config.validate()
    if issues:
        raise SystemExit("Invalid configuration: " + "; ".join(issues))

    configure_logging(config.logging)
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting BugX setup service on port {port}")
    uvicorn.run(create_app(config), host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
