"""Price calculation and price creation endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from tourdesk.app.api.activity import http_error, record_activity
from tourdesk.app.api.deps import get_activity_log, get_api_client, get_app_settings, get_store
from tourdesk.app.config import Settings
from tourdesk.app.models.requests import CabRowsRequest, HotelRowsRequest
from tourdesk.app.pricing.calculator import (
    CabPriceCalculator,
    HotelPriceCalculator,
    PriceCalculator,
)
from tourdesk.app.pricing.forms import (
    NewCabPricesForm,
    NewHotelPricesForm,
    save_cab_prices,
    save_hotel_prices,
)
from tourdesk.app.store.core import Store
from tourdesk.app.store.resources import hotels

router = APIRouter(prefix="/api", tags=["prices"])


def serialize_calculator(calculator: PriceCalculator) -> Dict[str, Any]:
    return {
        "rows": [row.model_dump(mode="json") for row in calculator.rows],
        "total": calculator.total,
        "items": calculator.quote_items(),
    }


async def _calculate(
    calculator: PriceCalculator, activity_log: List[Dict[str, Any]]
) -> Dict[str, Any]:
    ok = await calculator.submit()
    result = serialize_calculator(calculator)
    record_activity(
        activity_log,
        action=f"prices.{calculator.group}",
        method="GET",
        endpoint="/prices",
        payload={"rows": len(calculator.rows)},
        response={"total": calculator.total},
        status="success" if ok else "error",
    )
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": calculator.status or "Please fix the highlighted fields.",
                "errors": calculator.errors,
            },
        )
    return result


@router.post("/prices/hotels")
async def calculate_hotel_prices(
    request: HotelRowsRequest,
    client: Any = Depends(get_api_client),
    settings: Settings = Depends(get_app_settings),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Price hotel calculator rows; edited given prices are kept."""
    calculator = HotelPriceCalculator(
        client,
        rows=request.rows,
        debounce_seconds=settings.price_debounce_seconds,
        tz_name=settings.timezone,
    )
    return await _calculate(calculator, activity_log)


@router.post("/prices/cabs")
async def calculate_cab_prices(
    request: CabRowsRequest,
    client: Any = Depends(get_api_client),
    settings: Settings = Depends(get_app_settings),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    calculator = CabPriceCalculator(
        client,
        rows=request.rows,
        debounce_seconds=settings.price_debounce_seconds,
        tz_name=settings.timezone,
    )
    return await _calculate(calculator, activity_log)


@router.get("/hotels/{hotel_id}/prices")
async def list_hotel_prices(
    hotel_id: int = Path(..., ge=1),
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Load the prices of one hotel into the store and return them."""
    try:
        await store.run(hotels.fetch_prices(hotel_id))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="hotels.prices",
            method="GET",
            endpoint="/hotel-prices",
            payload={"hotel_id": hotel_id},
        ) from exc

    prices = hotels.selectors(store.get_state()).get_hotel_prices(hotel_id)
    record_activity(
        activity_log,
        action="hotels.prices",
        method="GET",
        endpoint="/hotel-prices",
        payload={"hotel_id": hotel_id},
        response={"count": len(prices)},
    )
    return {"data": [price.model_dump() for price in prices]}


@router.post("/hotels/{hotel_id}/prices")
async def add_hotel_prices(
    form: NewHotelPricesForm,
    hotel_id: int = Path(..., ge=1),
    client: Any = Depends(get_api_client),
    settings: Settings = Depends(get_app_settings),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Create one price per location x meal plan x room type x interval."""
    payload = form.to_payload(settings.timezone)
    try:
        created = await save_hotel_prices(client, hotel_id, form, tz_name=settings.timezone)
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="hotels.prices.create",
            method="POST",
            endpoint=f"/hotels/{hotel_id}/prices",
            payload=payload,
        ) from exc

    record_activity(
        activity_log,
        action="hotels.prices.create",
        method="POST",
        endpoint=f"/hotels/{hotel_id}/prices",
        payload=payload,
        response={"count": len(created)},
    )
    return {"data": [price.model_dump() for price in created]}


@router.post("/cab-prices")
async def add_cab_prices(
    form: NewCabPricesForm,
    client: Any = Depends(get_api_client),
    settings: Settings = Depends(get_app_settings),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    payload = form.to_payload(settings.timezone)
    try:
        created = await save_cab_prices(client, form, tz_name=settings.timezone)
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action="cab_prices.create",
            method="POST",
            endpoint="/cab-prices",
            payload=payload,
        ) from exc

    record_activity(
        activity_log,
        action="cab_prices.create",
        method="POST",
        endpoint="/cab-prices",
        payload=payload,
        response={"count": len(created)},
    )
    return {"data": [price.model_dump() for price in created]}
