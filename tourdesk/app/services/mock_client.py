"""Mock tour operations API providing local demo data."""

from __future__ import annotations

import asyncio
import copy
import re
from datetime import date, datetime, timedelta, timezone
from math import ceil
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from loguru import logger
from pydantic import BaseModel, ValidationError

from tourdesk.app.config import Settings
from tourdesk.app.models.accounts import (
    Notification,
    Permission,
    Role,
    Tenant,
    User,
)
from tourdesk.app.models.hotels import (
    ExtraService,
    Hotel,
    HotelBookingStage,
    HotelPaymentPreference,
    HotelPrice,
    MealPlan,
    RoomType,
)
from tourdesk.app.models.locations import CountryDialCode, Location
from tourdesk.app.models.transport import (
    Cab,
    CabType,
    TransportLocation,
    TransportService,
    TransportServicePrice,
)
from tourdesk.app.models.trips import (
    GivenQuote,
    Quote,
    Trip,
    TripPlanRequest,
    TripSource,
    TripStage,
)
from tourdesk.app.pricing.forms import formik_errors
from tourdesk.app.services.api_client import ApiError

DEFAULT_PER_PAGE = 10
SERVER_FORMAT = "%Y-%m-%d %H:%M:%S"
MOCK_EMAIL = "admin@example.com"
MOCK_PASSWORD = "secret"

ENTITIES: Dict[str, Type[BaseModel]] = {
    "hotels": Hotel,
    "hotel-prices": HotelPrice,
    "room-types": RoomType,
    "meal-plans": MealPlan,
    "hotel-payment-preferences": HotelPaymentPreference,
    "hotel-booking-stages": HotelBookingStage,
    "locations": Location,
    "country-dial-codes": CountryDialCode,
    "cabs": Cab,
    "cab-types": CabType,
    "transport-services": TransportService,
    "cab-prices": TransportServicePrice,
    "transport-locations": TransportLocation,
    "trips": Trip,
    "given-quotes": GivenQuote,
    "trip-sources": TripSource,
    "trip-stages": TripStage,
    "trip-plan-requests": TripPlanRequest,
    "tenants": Tenant,
    "users": User,
    "roles": Role,
    "permissions": Permission,
    "extra-services": ExtraService,
    "notifications": Notification,
}


def _day(value: Any) -> date:
    """Calendar day of a server timestamp or ISO date."""
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def _invalid(errors: Dict[str, str], status_code: int = 422) -> ApiError:
    payload = {
        "error": {
            "message": "The given data was invalid.",
            "errors": {name: [message] for name, message in errors.items()},
        }
    }
    return ApiError.from_response(status_code, payload)


def _validation_error(exc: ValidationError, prefix: str = "") -> ApiError:
    return _invalid(formik_errors(exc, prefix))


def _not_found(path: str) -> ApiError:
    return ApiError.from_response(404, {"error": {"message": f"{path} not found"}})


def _seed() -> Dict[str, List[Dict[str, Any]]]:
    locations = [
        {"id": 1, "name": "Gangtok", "short_name": "GTK"},
        {"id": 2, "name": "Darjeeling", "short_name": "DJ"},
    ]
    meal_plans = [
        {"id": 1, "name": "CP", "description": "Breakfast only"},
        {"id": 2, "name": "MAP", "description": "Breakfast and dinner"},
    ]
    room_types = [
        {"id": 1, "name": "Deluxe"},
        {"id": 2, "name": "Suite"},
    ]
    cab_types = [
        {"id": 1, "name": "Sedan", "capacity": 4},
        {"id": 2, "name": "SUV", "capacity": 7},
    ]
    transport_services = [
        {"id": 1, "name": "Airport transfer", "distance": 120, "locations": [locations[0]]},
        {"id": 2, "name": "Local sightseeing", "distance": 60, "locations": [locations[0]]},
    ]
    preference = {
        "id": 1,
        "name": "50% advance",
        "breakdowns": [
            {"id": 2, "reference_name": "checkin", "day_offset": 0, "amount_share": 50},
            {"id": 1, "reference_name": "booking", "day_offset": -30, "amount_share": 50},
        ],
    }
    return {
        "locations": locations,
        "meal-plans": meal_plans,
        "room-types": room_types,
        "hotels": [
            {
                "id": 1,
                "name": "Mayfair Spa Resort",
                "stars": 5,
                "location": locations[0],
                "meal_plans": meal_plans,
                "room_types": [{**room_types[0], "allowed_extra_beds": 1}],
                "payment_preference": preference,
            },
            {
                "id": 2,
                "name": "Windamere",
                "stars": 4,
                "location": locations[1],
                "meal_plans": meal_plans[:1],
                "room_types": [{**room_types[1], "allowed_extra_beds": 0}],
            },
        ],
        "hotel-prices": [
            {
                "id": 1,
                "hotel_id": 1,
                "base_price": 5000,
                "persons": 2,
                "adult_with_extra_bed_price": 1200,
                "child_with_extra_bed_price": 800,
                "child_without_extra_bed_price": 400,
                "start_date": "2024-01-01 00:00:00",
                "end_date": "2026-12-31 23:59:59",
                "meal_plan_id": 1,
                "room_type_id": 1,
                "location_id": 1,
            },
            {
                "id": 2,
                "hotel_id": 1,
                "base_price": 6500,
                "persons": 2,
                "adult_with_extra_bed_price": 1500,
                "child_with_extra_bed_price": 1000,
                "child_without_extra_bed_price": 500,
                "start_date": "2024-01-01 00:00:00",
                "end_date": "2026-12-31 23:59:59",
                "meal_plan_id": 2,
                "room_type_id": 1,
                "location_id": 1,
            },
            {
                "id": 3,
                "hotel_id": 2,
                "base_price": 4000,
                "persons": 2,
                "start_date": "2024-01-01 00:00:00",
                "end_date": "2024-06-30 23:59:59",
                "meal_plan_id": 1,
                "room_type_id": 2,
                "location_id": 2,
            },
        ],
        "hotel-payment-preferences": [preference],
        "hotel-booking-stages": [
            {"id": 1, "name": "Initiated", "state": 1},
            {"id": 2, "name": "Confirmed", "state": 2},
        ],
        "country-dial-codes": [
            {"id": 1, "name": "India", "dial_code": "+91", "iso": "IN"},
            {"id": 2, "name": "Nepal", "dial_code": "+977", "iso": "NP"},
        ],
        "cab-types": cab_types,
        "cabs": [
            {"id": 1, "name": "Dzire", "number_plate": "SK01 1234", "cab_type": cab_types[0]},
        ],
        "transport-services": transport_services,
        "cab-prices": [
            {
                "id": 1,
                "start_date": "2024-01-01 00:00:00",
                "end_date": "2026-12-31 23:59:59",
                "cab_type_id": 1,
                "transport_service_id": 1,
                "price": 3000,
                "toll_charges": 200,
                "parking_charges": 100,
            },
            {
                "id": 2,
                "start_date": "2024-01-01 00:00:00",
                "end_date": "2026-12-31 23:59:59",
                "cab_type_id": 2,
                "transport_service_id": 2,
                "per_km_charges": 20,
                "minimum_km_per_day": 100,
            },
        ],
        "transport-locations": [
            {"id": 1, "name": "Bagdogra Airport", "short_name": "IXB"},
            {"id": 2, "name": "NJP Railway Station", "short_name": "NJP"},
        ],
        "trip-sources": [
            {"id": 1, "name": "Website", "short_name": "WEB"},
            {"id": 2, "name": "Travel agent", "short_name": "TA"},
        ],
        "trip-stages": [
            {"id": 1, "name": "Initiated"},
            {"id": 2, "name": "Converted"},
        ],
        "trips": [
            {
                "id": 1,
                "trip_id": "WEB-001",
                "start_date": "2024-03-10 00:00:00",
                "end_date": "2024-03-14 23:59:59",
                "no_of_adults": 2,
                "locations": locations,
                "trip_source": {"id": 1, "name": "Website", "short_name": "WEB"},
            },
        ],
        "given-quotes": [],
        "trip-plan-requests": [
            {"id": 1, "name": "Asha Rai", "email": "asha@example.com", "no_of_adults": 2},
        ],
        "permissions": [
            {"id": 1, "name": "view_hotels"},
            {"id": 2, "name": "manage_prices"},
        ],
        "roles": [{"id": 1, "name": "Admin"}],
        "users": [
            {"id": 1, "name": "Demo Admin", "email": MOCK_EMAIL, "roles": [{"id": 1, "name": "Admin"}]},
        ],
        "tenants": [{"id": 1, "name": "Demo Travels", "description": "Mock tenant"}],
        "extra-services": [{"id": 1, "name": "Candle light dinner"}],
        "notifications": [
            {
                "id": 1,
                "type": "TripPlanRequestCreated",
                "data": {"trip_plan_request_id": 1},
                "created_at": "2024-01-05 10:00:00",
            },
            {
                "id": 2,
                "type": "QuoteGiven",
                "data": {"quote_id": 1},
                "read_at": "2024-01-04 09:00:00",
                "created_at": "2024-01-04 08:00:00",
            },
        ],
    }


class MockApiClient:
    """In-memory client mimicking the REST API behaviour."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._token: Optional[str] = settings.access_token
        self._collections = {
            slug: [ENTITIES[slug].model_validate(raw).model_dump(by_alias=True) for raw in records]
            for slug, records in _seed().items()
        }
        self._next_ids = {
            slug: max((record["id"] for record in records), default=0) + 1
            for slug, records in self._collections.items()
        }
        self._quote_ids = 1
        self._routes: List[Tuple[str, re.Pattern, Callable[..., Dict[str, Any]]]] = [
            ("POST", re.compile(r"^/login$"), self._login),
            ("DELETE", re.compile(r"^/logout$"), self._logout),
            ("GET", re.compile(r"^/me$"), self._me),
            ("GET", re.compile(r"^/prices$"), self._prices),
            ("POST", re.compile(r"^/hotels/(?P<hotel_id>\d+)/prices$"), self._store_hotel_prices),
            ("POST", re.compile(r"^/cab-prices$"), self._store_cab_prices),
            ("POST", re.compile(r"^/trips/(?P<trip_id>\d+)/quotes$"), self._store_quote),
            ("PATCH", re.compile(r"^/notifications/mark-as-read$"), self._mark_as_read),
            ("GET", re.compile(r"^/(?P<slug>[a-z-]+)$"), self._list),
            ("POST", re.compile(r"^/(?P<slug>[a-z-]+)$"), self._create),
            ("GET", re.compile(r"^/(?P<slug>[a-z-]+)/(?P<item_id>\d+)$"), self._show),
            ("PUT", re.compile(r"^/(?P<slug>[a-z-]+)/(?P<item_id>\d+)$"), self._update),
            ("PATCH", re.compile(r"^/(?P<slug>[a-z-]+)/(?P<item_id>\d+)$"), self._update),
            ("DELETE", re.compile(r"^/(?P<slug>[a-z-]+)/(?P<item_id>\d+)$"), self._destroy),
        ]

    async def close(self) -> None:
        """Mock close to align with TourApiClient interface."""
        await asyncio.sleep(0)

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    # --- Transport ---

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        await asyncio.sleep(0)
        logger.debug("Mock API request {method} {url}", method=method, url=url)
        path = url.rstrip("/") or "/"
        for route_method, pattern, handler in self._routes:
            match = pattern.match(path)
            if route_method == method and match:
                response = handler(
                    **match.groupdict(), params=dict(params or {}), data=dict(data or {})
                )
                return copy.deepcopy(response)
        raise _not_found(path)

    async def get(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("GET", url, params=params)

    async def post(self, url: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("POST", url, data=data)

    async def put(self, url: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("PUT", url, data=data)

    async def patch(self, url: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("PATCH", url, data=data)

    async def delete(self, url: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("DELETE", url, data=data)

    # --- Session ---

    async def login(self, credentials: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.post("/login", credentials)

    async def logout(self) -> None:
        try:
            await self.delete("/logout")
        finally:
            self.set_token(None)

    async def get_current_user(self) -> Dict[str, Any]:
        response = await self.get("/me")
        return response.get("data") or {}

    async def get_prices(self, group: str, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self.get("/prices", params={group: rows})

    def _login(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("email") != MOCK_EMAIL or data.get("password") != MOCK_PASSWORD:
            raise _invalid({"email": "These credentials do not match our records."})
        self._token = "mock-token"
        return {"access_token": self._token, "token_type": "Bearer"}

    def _logout(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        self._token = None
        return {}

    def _me(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        if not self._token:
            raise ApiError.from_response(401, {"error": {"message": "Unauthenticated."}})
        return {"data": self._collections["users"][0]}

    # --- Collections ---

    def _records(self, slug: str) -> List[Dict[str, Any]]:
        if slug not in self._collections:
            raise _not_found(f"/{slug}")
        return self._collections[slug]

    def _find(self, slug: str, item_id: Any) -> Dict[str, Any]:
        for record in self._records(slug):
            if record["id"] == int(item_id):
                return record
        raise _not_found(f"/{slug}/{item_id}")

    def _validated(self, slug: str, raw: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
        record = {**raw, "id": self._next_ids[slug]}
        try:
            model = ENTITIES[slug].model_validate(record)
        except ValidationError as exc:
            raise _validation_error(exc, prefix) from exc
        self._next_ids[slug] += 1
        return model.model_dump(by_alias=True)

    def _list(self, slug: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        records = self._records(slug)
        query = str(params.pop("q", "") or "").lower()
        page = max(int(params.pop("page", 1) or 1), 1)
        per_page = max(int(params.pop("per_page", DEFAULT_PER_PAGE) or DEFAULT_PER_PAGE), 1)
        if query:
            records = [
                record for record in records if query in str(record.get("name", "")).lower()
            ]
        for key, value in params.items():
            if isinstance(value, (dict, list)):
                continue
            records = [record for record in records if str(record.get(key)) == str(value)]

        total = len(records)
        start = (page - 1) * per_page
        chunk = records[start : start + per_page]
        return {
            "data": chunk,
            "meta": {
                "total": total,
                "from": start + 1 if chunk else None,
                "to": start + len(chunk) if chunk else None,
                "current_page": page,
                "last_page": max(ceil(total / per_page), 1),
                "per_page": per_page,
                "path": f"/{slug}",
            },
        }

    def _show(self, slug: str, item_id: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        return {"data": self._find(slug, item_id)}

    def _create(self, slug: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        self._records(slug)
        record = self._validated(slug, data)
        self._collections[slug].append(record)
        return {"data": record}

    def _update(self, slug: str, item_id: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        record = self._find(slug, item_id)
        updated = {**record, **data}
        try:
            ENTITIES[slug].model_validate(updated)
        except ValidationError as exc:
            raise _validation_error(exc) from exc
        record.update(updated)
        return {"data": record}

    def _destroy(self, slug: str, item_id: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        record = self._find(slug, item_id)
        self._collections[slug].remove(record)
        return {}

    # --- Prices ---

    def _store_hotel_prices(self, hotel_id: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        self._find("hotels", hotel_id)
        rows = data.get("prices") or []
        if not rows:
            raise _invalid({"prices": "Please add atleast one price."})
        created = [
            self._validated("hotel-prices", {**row, "hotel_id": int(hotel_id)}, f"prices.{index}")
            for index, row in enumerate(rows)
        ]
        self._collections["hotel-prices"].extend(created)
        return {"data": created}

    def _store_cab_prices(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        if "prices" not in data:
            return self._create("cab-prices", params=params, data=data)
        rows = data.get("prices") or []
        if not rows:
            raise _invalid({"prices": "Please add atleast one price."})
        created = [
            self._validated("cab-prices", row, f"prices.{index}")
            for index, row in enumerate(rows)
        ]
        self._collections["cab-prices"].extend(created)
        return {"data": created}

    def _prices(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        response: Dict[str, Any] = {}
        if "hotels" in params:
            response["hotels"] = [self._price_hotel(row) for row in params["hotels"] or []]
        if "cabs" in params:
            response["cabs"] = [self._price_cab(row) for row in params["cabs"] or []]
        return response

    @staticmethod
    def _covering(records: List[Dict[str, Any]], day: date) -> Optional[Dict[str, Any]]:
        for record in records:
            if _day(record["start_date"]) <= day <= _day(record["end_date"]):
                return record
        return None

    def _price_hotel(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        candidates = [
            record
            for record in self._collections["hotel-prices"]
            if record["hotel_id"] == int(row["hotel_id"])
            and record.get("location_id") == int(row["location_id"])
            and record["meal_plan_id"] == int(row["meal_plan_id"])
            and record["room_type_id"] == int(row["room_type_id"])
        ]
        price = 0.0
        missing: List[str] = []
        night = _day(row["start_date"])
        checkout = _day(row["end_date"])
        while night < checkout:
            record = self._covering(candidates, night)
            if record is None:
                missing.append(night.isoformat())
            else:
                price += (
                    record["base_price"] * int(row.get("no_of_rooms") or 1)
                    + record["adult_with_extra_bed_price"] * int(row.get("a_w_e_b") or 0)
                    + record["child_with_extra_bed_price"] * int(row.get("c_w_e_b") or 0)
                    + record["child_without_extra_bed_price"] * int(row.get("c_wo_e_b") or 0)
                )
            night += timedelta(days=1)
        return {"price": price, "no_price_for_dates": missing}

    def _price_cab(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        candidates = [
            record
            for record in self._collections["cab-prices"]
            if record["transport_service_id"] == int(row["transport_service_id"])
            and record["cab_type_id"] == int(row["cab_type_id"])
        ]
        price = 0.0
        missing: List[str] = []
        day = _day(row["from_date"])
        last_day = _day(row["to_date"])
        while day <= last_day:
            record = self._covering(candidates, day)
            if record is None:
                missing.append(day.isoformat())
            else:
                daily = record.get("price")
                if daily is None:
                    daily = (record.get("per_km_charges") or 0) * (
                        record.get("minimum_km_per_day") or 0
                    )
                daily += (
                    record.get("toll_charges", 0)
                    + record.get("parking_charges", 0)
                    + record.get("night_charges", 0)
                )
                price += daily * int(row.get("no_of_cabs") or 1)
            day += timedelta(days=1)
        return {"price": price, "no_price_for_dates": missing}

    # --- Trips and notifications ---

    def _store_quote(self, trip_id: str, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        trip = self._find("trips", trip_id)
        raw = {
            **data,
            "id": self._quote_ids,
            "trip_id": trip["id"],
            "created_at": datetime.now(timezone.utc).strftime(SERVER_FORMAT),
        }
        try:
            quote = Quote.model_validate(raw)
        except ValidationError as exc:
            raise _validation_error(exc) from exc
        if not quote.hotels and not quote.cabs:
            raise _invalid({"hotels": "Please add atleast one hotel or cab."})
        self._quote_ids += 1
        record = quote.model_dump()
        trip.setdefault("quotes", []).append(record)
        return {"data": record}

    def _mark_as_read(self, *, params: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        ids = {int(item_id) for item_id in data.get("items") or []}
        read_at = datetime.now(timezone.utc).strftime(SERVER_FORMAT)
        for record in self._collections["notifications"]:
            if record["id"] in ids and not record.get("read_at"):
                record["read_at"] = read_at
        return {"message": "Notifications marked as read"}
