"""
FastAPI server for the DuckDB chat-extension relay with SSE streaming.

This module handles application setup, lifespan management, and logging
configuration. Route handlers are organized in the routers/ package.

Long-lived resources live on ``app.state`` for the life of the process:
- the DuckDB connection shared by every request
- one ``httpx.AsyncClient`` for the LLM, identity and key endpoints
- the relay client bundle and the request verifier built from them
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from api.routers import agent_router
from config.settings import get_settings
from dotenv import load_dotenv
from entities.relay.clients import create_relay_clients, create_request_verifier
from entities.shared.sql_client import DuckDBClient
from fastapi import FastAPI

load_dotenv()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=get_settings().log_level, force=True)

# Reduce noise from HTTP client libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Opens the database and HTTP client on startup and closes them on
    shutdown. Request pipelines are created per request by the router.
    """
    settings = get_settings()
    logger.info("DuckDB relay starting")

    db = DuckDBClient.connect(settings.database_path)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))

    application.state.db = db
    application.state.http_client = http_client
    application.state.relay_clients = create_relay_clients(settings, http_client, db)
    application.state.verifier = create_request_verifier(settings, http_client)

    try:
        yield
    finally:
        await http_client.aclose()
        db.close()
        logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="DuckDB Chat Relay", lifespan=lifespan)

# Include routers
app.include_router(agent_router)


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint."""
    relay_ready = getattr(app.state, "relay_clients", None) is not None
    return {"status": "healthy", "relay_ready": relay_ready}


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run("api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
