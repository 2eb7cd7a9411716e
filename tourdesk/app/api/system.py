"""Health and activity log endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from tourdesk.app.api.deps import get_activity_log, get_app_settings
from tourdesk.app.config import Settings
from tourdesk.app.store.resources import RESOURCES

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
async def health(
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Report the backend mode and the store and pricing configuration."""
    return {
        "status": "ok",
        "app_name": settings.app_name,
        "use_mock_data": settings.use_mock_data,
        "timezone": settings.timezone,
        "fence_stale_responses": settings.fence_stale_responses,
        "price_debounce_seconds": settings.price_debounce_seconds,
        "method_override": settings.method_override,
        "resources": sorted(RESOURCES),
    }


@router.get("/activity")
async def activity_log(
    activity_log=Depends(get_activity_log),
    action: Optional[str] = Query(default=None, description="Prefix such as `hotels.`"),
    errors_only: bool = Query(default=False),
    limit: Optional[int] = Query(default=None, ge=1),
) -> List[Dict[str, Any]]:
    """Return recorded activity, newest last."""
    entries = [
        entry
        for entry in activity_log
        if (action is None or entry["action"].startswith(action))
        and (not errors_only or entry["status"] == "error")
    ]
    return entries if limit is None else entries[-limit:]


@router.delete("/activity")
async def clear_activity(
    activity_log=Depends(get_activity_log),
) -> Dict[str, str]:
    activity_log.clear()
    return {"status": "cleared"}
