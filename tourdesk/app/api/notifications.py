"""Notification channel and mark-as-read endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from tourdesk.app.api.activity import http_error, record_activity
from tourdesk.app.api.deps import get_activity_log, get_store
from tourdesk.app.models.requests import MarkAsReadRequest
from tourdesk.app.store.core import Store
from tourdesk.app.store.resources import notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("/push")
async def push_notification(
    payload: Dict[str, Any],
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Accept a notification from the user's channel; newest first."""
    try:
        store.dispatch(notifications.push(payload))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="notifications.push",
            method="POST",
            endpoint="/notifications",
            payload=payload,
        ) from exc

    view = notifications.selectors(store.get_state())
    record_activity(
        activity_log,
        action="notifications.push",
        method="POST",
        endpoint="/notifications",
        payload=payload,
    )
    return {"unread_count": view.unread_count, "ids": [item.id for item in view.items]}


@router.post("/read")
async def mark_as_read(
    request: MarkAsReadRequest,
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Mark cached notifications as read; unknown ids are ignored."""
    view = notifications.selectors(store.get_state())
    selected = [item for item in map(view.get_item, request.ids) if item is not None]
    try:
        read = await store.run(notifications.mark_as_read(selected))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="notifications.read",
            method="PATCH",
            endpoint="/notifications/mark-as-read",
            payload={"items": request.ids},
        ) from exc

    record_activity(
        activity_log,
        action="notifications.read",
        method="PATCH",
        endpoint="/notifications/mark-as-read",
        payload={"items": [item.id for item in read]},
    )
    view = notifications.selectors(store.get_state())
    return {"read": [item.id for item in read], "unread_count": view.unread_count}
