"""Helpers to record request/response activity."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from loguru import logger
from pydantic import ValidationError

from tourdesk.app.pricing.forms import formik_errors
from tourdesk.app.services.api_client import ApiError

PASSTHROUGH_STATUSES = (401, 403, 404)


def record_activity(
    log: List[Dict[str, Any]],
    *,
    action: str,
    method: str,
    endpoint: str,
    payload: Optional[Dict[str, Any]] = None,
    response: Optional[Any] = None,
    status: str = "success",
) -> None:
    """Append a structured entry to the in-memory activity log."""
    log.append(
        {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "method": method,
            "endpoint": endpoint,
            "payload": payload,
            "response": response,
            "status": status,
        }
    )


def http_error(
    log: List[Dict[str, Any]],
    exc: Exception,
    *,
    action: str,
    method: str,
    endpoint: str,
    payload: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """Record a failed call and translate the error into an HTTP response.

    API rejections carrying field errors become 422 with a
    ``{"message", "errors"}`` detail; other rejections become 400 unless
    the upstream status is an auth or lookup failure. Invalid payloads
    become 422 with their field errors; anything else is 500.
    """
    if isinstance(exc, ApiError):
        record_activity(
            log,
            action=action,
            method=method,
            endpoint=endpoint,
            payload=payload,
            status="error",
            response={"status_code": exc.status_code, "payload": exc.payload},
        )
        if exc.formik_errors:
            return HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"message": exc.message, "errors": exc.formik_errors},
            )
        if exc.status_code in PASSTHROUGH_STATUSES:
            return HTTPException(status_code=exc.status_code, detail=exc.message)
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)

    if isinstance(exc, ValidationError):
        errors = formik_errors(exc)
        record_activity(
            log,
            action=action,
            method=method,
            endpoint=endpoint,
            payload=payload,
            status="error",
            response={"errors": errors},
        )
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "The given data was invalid.", "errors": errors},
        )

    logger.exception("Unexpected error during {action}", action=action)
    record_activity(
        log,
        action=action,
        method=method,
        endpoint=endpoint,
        payload=payload,
        status="error",
        response={"error": str(exc)},
    )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unexpected {action} error",
    )
