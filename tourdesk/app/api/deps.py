"""FastAPI dependency helpers."""

from typing import Any, Dict, List

from fastapi import Depends, Request

from tourdesk.app.config import Settings, get_settings
from tourdesk.app.store.core import Store


def get_app_settings() -> Settings:
    """Provide application settings."""
    return get_settings()


def get_api_client(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> Any:
    """Retrieve the REST API client from app state."""
    client = request.app.state.api_client  # type: ignore[attr-defined]
    return client


def get_store(request: Request) -> Store:
    """Retrieve the console store from app state."""
    store: Store = request.app.state.store  # type: ignore[attr-defined]
    return store


def get_activity_log(request: Request) -> List[Dict[str, Any]]:
    """Return activity log stored in app state."""
    log: List[Dict[str, Any]] = request.app.state.activity_log  # type: ignore[attr-defined]
    return log
