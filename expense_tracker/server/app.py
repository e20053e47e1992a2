"""
Expense API Server

FastAPI application serving the expense collection from MongoDB under
/api/expenses. This is the service the remote backend talks to.

Run with:
    uvicorn expense_tracker.server.app:app --port 5000
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from expense_tracker import __version__
from expense_tracker.config import ServerSettings, get_settings
from expense_tracker.logging_setup import configure_logging
from expense_tracker.server.routes import router as api_router


logger = structlog.get_logger(__name__)


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Build the application. Connection details come from ServerSettings."""
    settings = settings or get_settings().server
    app_state: dict = {}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: Motor connects lazily, so this only fails on a bad URI
        logger.info("mongodb_connecting", db_name=settings.db_name)
        client = AsyncIOMotorClient(settings.mongodb_uri)
        app_state["db_client"] = client
        app_state["expenses_collection"] = client[settings.db_name].get_collection(
            settings.collection_name
        )
        logger.info(
            "mongodb_ready",
            db_name=settings.db_name,
            collection=settings.collection_name,
        )

        yield

        # Shutdown
        client.close()
        app_state.clear()
        logger.info("mongodb_closed")

    app = FastAPI(
        title="Expense Tracker API",
        description="CRUD API for the expense collection.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_collection_to_request(request: Request, call_next):
        """Expose the expenses collection on request state."""
        request.state.expenses_collection = app_state.get("expenses_collection")
        return await call_next(request)

    app.include_router(api_router, prefix="/api", tags=["expenses"])
    return app


def _build_default_app() -> FastAPI:
    app_settings = get_settings().app
    configure_logging(app_settings.log_level, app_settings.log_json)
    return create_app()


app = _build_default_app()


if __name__ == "__main__":
    import uvicorn

    server_settings = get_settings().server
    uvicorn.run(
        "expense_tracker.server.app:app",
        host=server_settings.host,
        port=server_settings.port,
    )
