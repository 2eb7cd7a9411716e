"""Entrypoint for the tourdesk admin console FastAPI backend."""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List

from fastapi import FastAPI
from loguru import logger

from tourdesk.app.api import auth, notifications, prices, resources, system, trips
from tourdesk.app.config import Settings, get_settings
from tourdesk.app.services.api_client import TourApiClient
from tourdesk.app.services.mock_client import MockApiClient
from tourdesk.app.store.resources import configure_store


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup/shutdown routines."""
    settings: Settings = get_settings()
    configure_logging(settings)
    client: TourApiClient | MockApiClient
    if settings.use_mock_data:
        client = MockApiClient(settings)
    else:
        client = TourApiClient(settings)
    activity_log: List[Dict[str, Any]] = []

    app.state.settings = settings  # type: ignore[attr-defined]
    app.state.api_client = client  # type: ignore[attr-defined]
    app.state.store = configure_store(client, settings)  # type: ignore[attr-defined]
    app.state.activity_log = activity_log  # type: ignore[attr-defined]

    logger.info(
        "Starting tourdesk backend (mock mode = {mock})",
        mock=settings.use_mock_data,
    )
    try:
        yield
    finally:
        await client.close()
        logger.info("tourdesk backend shutdown complete")


app = FastAPI(
    title="Tourdesk Admin Backend",
    version="0.1.0",
    lifespan=lifespan,
)


app.include_router(system.router)
app.include_router(auth.router)
app.include_router(resources.router)
app.include_router(prices.router)
app.include_router(trips.router)
app.include_router(notifications.router)


@app.get("/")
async def root() -> Dict[str, str]:
    """Simple root endpoint for manual verification."""
    return {"message": "tourdesk backend is running"}
