"""Authentication-related endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from tourdesk.app.api.activity import http_error, record_activity
from tourdesk.app.api.deps import get_activity_log, get_store
from tourdesk.app.models.requests import Credentials
from tourdesk.app.store import auth
from tourdesk.app.store.core import Store

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    credentials: Credentials,
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Log in and return the authenticated user."""
    try:
        user = await store.run(auth.login(credentials.model_dump()))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="login",
            method="POST",
            endpoint="/login",
            payload={"email": credentials.email},
        ) from exc

    record_activity(
        activity_log,
        action="login",
        method="POST",
        endpoint="/login",
        payload={"email": credentials.email},
        response={"token": "***redacted***"},
    )
    view = auth.selectors(store.get_state())
    return {"status": view.status.value, "user": user.model_dump()}


@router.get("/me")
async def me(
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Check the stored session and return the current user."""
    try:
        user = await store.run(auth.check_auth())
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log, exc, action="check_auth", method="GET", endpoint="/me"
        ) from exc

    record_activity(
        activity_log,
        action="check_auth",
        method="GET",
        endpoint="/me",
        response=user.model_dump(),
    )
    view = auth.selectors(store.get_state())
    return {"status": view.status.value, "user": user.model_dump()}


@router.post("/logout")
async def logout(
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    try:
        await store.run(auth.logout())
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log, exc, action="logout", method="DELETE", endpoint="/logout"
        ) from exc

    record_activity(activity_log, action="logout", method="DELETE", endpoint="/logout")
    return {"status": auth.selectors(store.get_state()).status.value}
