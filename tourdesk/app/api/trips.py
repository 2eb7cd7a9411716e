"""Trip quote endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from tourdesk.app.api.activity import http_error, record_activity
from tourdesk.app.api.deps import get_activity_log, get_api_client, get_app_settings
from tourdesk.app.config import Settings
from tourdesk.app.models.requests import QuoteRequest
from tourdesk.app.pricing.quote import QuoteBuilder

router = APIRouter(prefix="/api/trips", tags=["trips"])


@router.post("/{trip_id}/quotes")
async def create_quote(
    request: QuoteRequest,
    trip_id: int = Path(..., ge=1),
    client: Any = Depends(get_api_client),
    settings: Settings = Depends(get_app_settings),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Reprice the quote rows, then save the quote with its total."""
    builder = QuoteBuilder(
        client,
        trip_id,
        hotels=request.hotels,
        cabs=request.cabs,
        comments=request.comments,
        debounce_seconds=settings.price_debounce_seconds,
        tz_name=settings.timezone,
    )
    if not await builder.calculate():
        errors = {**builder.hotels.errors, **builder.cabs.errors}
        record_activity(
            activity_log,
            action="trips.quote",
            method="GET",
            endpoint="/prices",
            payload={"trip_id": trip_id},
            status="error",
            response={"errors": errors},
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": builder.hotels.status
                or builder.cabs.status
                or "Please fix the highlighted fields.",
                "errors": errors,
            },
        )

    payload = builder.to_payload()
    try:
        quote = await builder.save()
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="trips.quote",
            method="POST",
            endpoint=f"/trips/{trip_id}/quotes",
            payload=payload,
        ) from exc

    record_activity(
        activity_log,
        action="trips.quote",
        method="POST",
        endpoint=f"/trips/{trip_id}/quotes",
        payload=payload,
        response={"id": quote.id, "total_price": quote.total_price},
    )
    return {"data": quote.model_dump()}
