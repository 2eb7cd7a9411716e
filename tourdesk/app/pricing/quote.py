"""Trip quote assembled from a hotel and a cab price calculator."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from tourdesk.app.models.trips import Quote
from tourdesk.app.pricing.calculator import CabPriceCalculator, HotelPriceCalculator
from tourdesk.app.pricing.forms import CabPriceQuery, HotelPriceQuery


class QuoteBuilder:
    """Tracks the totals and line items of both calculators of a trip."""

    def __init__(
        self,
        client: Any,
        trip_id: int,
        *,
        hotels: Optional[List[HotelPriceQuery]] = None,
        cabs: Optional[List[CabPriceQuery]] = None,
        comments: str = "",
        debounce_seconds: float = 0.3,
        tz_name: str = "UTC",
    ):
        self._client = client
        self.trip_id = trip_id
        self.comments = comments
        self.hotel_price: float = 0
        self.cab_price: float = 0
        self.hotel_items: List[Dict[str, Any]] = []
        self.cab_items: List[Dict[str, Any]] = []
        self.hotels = HotelPriceCalculator(
            client,
            rows=hotels,
            on_change=self._on_hotels_change,
            debounce_seconds=debounce_seconds,
            tz_name=tz_name,
        )
        self.cabs = CabPriceCalculator(
            client,
            rows=cabs,
            on_change=self._on_cabs_change,
            debounce_seconds=debounce_seconds,
            tz_name=tz_name,
        )
        self._on_hotels_change(self.hotels.total, self.hotels.quote_items())
        self._on_cabs_change(self.cabs.total, self.cabs.quote_items())

    def _on_hotels_change(self, total: float, items: List[Dict[str, Any]]) -> None:
        self.hotel_price = total
        self.hotel_items = items

    def _on_cabs_change(self, total: float, items: List[Dict[str, Any]]) -> None:
        self.cab_price = total
        self.cab_items = items

    @property
    def total_price(self) -> float:
        return self.hotel_price + self.cab_price

    async def calculate(self) -> bool:
        """Price every calculator the user filled in; untouched ones are skipped."""
        results = [
            await calculator.submit()
            for calculator in (self.hotels, self.cabs)
            if not calculator.is_blank
        ]
        return all(results)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "total_price": self.total_price,
            "hotels": self.hotel_items,
            "cabs": self.cab_items,
            "comments": self.comments,
        }

    async def save(self) -> Quote:
        response = await self._client.post(f"/trips/{self.trip_id}/quotes", self.to_payload())
        quote = Quote.model_validate(response.get("data"))
        logger.info(
            "Saved quote {quote_id} for trip {trip_id} ({total})",
            quote_id=quote.id,
            trip_id=self.trip_id,
            total=quote.total_price,
        )
        return quote
