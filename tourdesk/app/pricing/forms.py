"""Pydantic form models for price queries and price creation.

Dates entered in the console are local calendar dates; the backend stores
UTC timestamps formatted as ``YYYY-MM-DD HH:MM:SS``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from itertools import product
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Type
from zoneinfo import ZoneInfo

from pydantic import (
    BaseModel,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    ValidationError,
    field_validator,
    model_validator,
)

from tourdesk.app.models.hotels import HotelPrice
from tourdesk.app.models.transport import TransportServicePrice

SERVER_FORMAT = "%Y-%m-%d %H:%M:%S"
START_OF_DAY = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59)
HOTEL_CHECKIN = time(12, 0, 1)
HOTEL_CHECKOUT = time(12, 0, 0)


def to_utc_string(day: date, at: time, tz_name: str = "UTC") -> str:
    """Format local ``day`` at ``at`` as a UTC server timestamp."""
    tz = timezone.utc if tz_name == "UTC" else ZoneInfo(tz_name)
    local = datetime.combine(day, at).replace(tzinfo=tz)
    return local.astimezone(timezone.utc).strftime(SERVER_FORMAT)


def formik_errors(exc: ValidationError, prefix: str = "") -> Dict[str, str]:
    """Map a pydantic error to ``{"dotted.field.path": "message"}``."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in (prefix, *error["loc"]) if part != "")
        errors.setdefault(path, error["msg"])
    return errors


# --- Price query rows ---


class HotelPricingFields(BaseModel):
    start_date: date
    no_of_nights: PositiveInt
    hotel_id: int
    location_id: int
    meal_plan_id: int
    room_type_id: int
    adults_with_extra_bed: NonNegativeInt = 0
    children_with_extra_bed: NonNegativeInt = 0
    children_without_extra_bed: NonNegativeInt = 0
    no_of_rooms: PositiveInt


class CabPricingFields(BaseModel):
    start_date: date
    no_of_days: PositiveInt
    transport_service_id: int
    cab_type_id: int
    no_of_cabs: PositiveInt


class PriceQuoteLine(BaseModel):
    """One calculator row, editable before it is complete.

    Subclasses bind ``pricing_model`` and build the server payloads with
    ``to_price_query`` and ``to_quote_item``.
    """

    start_date: Optional[date] = None
    calculated_price: Optional[float] = None
    given_price: Optional[float] = None
    edited_given_price: bool = False
    comments: str = Field(default="", max_length=191)
    no_price_for_dates: List[str] = Field(default_factory=list)

    # changes to these fields reprice the row
    pricing_fields: ClassVar[FrozenSet[str]] = frozenset({"start_date"})
    pricing_model: ClassVar[Type[BaseModel]]

    @field_validator("start_date", mode="before")
    @classmethod
    def blank_date(cls, value: Any) -> Any:
        return None if value == "" else value

    def pricing_errors(self, prefix: str = "") -> Dict[str, str]:
        try:
            self.pricing_model.model_validate(self.model_dump(exclude_none=True))
        except ValidationError as exc:
            return formik_errors(exc, prefix)
        return {}

    def is_complete(self) -> bool:
        return not self.pricing_errors()


class HotelPriceQuery(PriceQuoteLine):
    no_of_nights: Optional[int] = 1
    hotel_id: Optional[int] = None
    location_id: Optional[int] = None
    meal_plan_id: Optional[int] = None
    room_type_id: Optional[int] = None
    adults_with_extra_bed: Optional[int] = 0
    children_with_extra_bed: Optional[int] = 0
    children_without_extra_bed: Optional[int] = 0
    no_of_rooms: Optional[int] = 1

    pricing_fields: ClassVar[FrozenSet[str]] = frozenset(
        {
            "start_date",
            "no_of_nights",
            "hotel_id",
            "location_id",
            "meal_plan_id",
            "room_type_id",
            "adults_with_extra_bed",
            "children_with_extra_bed",
            "children_without_extra_bed",
            "no_of_rooms",
        }
    )
    pricing_model: ClassVar[Type[BaseModel]] = HotelPricingFields

    def _stay(self, tz_name: str) -> Dict[str, str]:
        checkout = self.start_date + timedelta(days=self.no_of_nights)
        return {
            "checkin": to_utc_string(self.start_date, HOTEL_CHECKIN, tz_name),
            "checkout": to_utc_string(checkout, HOTEL_CHECKOUT, tz_name),
        }

    def to_price_query(self, tz_name: str = "UTC") -> Dict[str, Any]:
        stay = self._stay(tz_name)
        return {
            "start_date": stay["checkin"],
            "end_date": stay["checkout"],
            "hotel_id": self.hotel_id,
            "location_id": self.location_id,
            "meal_plan_id": self.meal_plan_id,
            "room_type_id": self.room_type_id,
            "a_w_e_b": self.adults_with_extra_bed,
            "c_w_e_b": self.children_with_extra_bed,
            "c_wo_e_b": self.children_without_extra_bed,
            "no_of_rooms": self.no_of_rooms,
        }

    def to_quote_item(self, tz_name: str = "UTC") -> Dict[str, Any]:
        return {
            **self._stay(tz_name),
            "hotel_id": self.hotel_id,
            "location_id": self.location_id,
            "meal_plan_id": self.meal_plan_id,
            "room_type_id": self.room_type_id,
            "adults_with_extra_bed": self.adults_with_extra_bed,
            "children_with_extra_bed": self.children_with_extra_bed,
            "children_without_extra_bed": self.children_without_extra_bed,
            "no_of_rooms": self.no_of_rooms,
            "calculated_price": self.calculated_price,
            "given_price": self.given_price or 0,
            "comments": self.comments,
        }


class CabPriceQuery(PriceQuoteLine):
    no_of_days: Optional[int] = 1
    transport_service_id: Optional[int] = None
    cab_type_id: Optional[int] = None
    no_of_cabs: Optional[int] = 1

    pricing_fields: ClassVar[FrozenSet[str]] = frozenset(
        {"start_date", "no_of_days", "transport_service_id", "cab_type_id", "no_of_cabs"}
    )
    pricing_model: ClassVar[Type[BaseModel]] = CabPricingFields

    def _period(self, tz_name: str) -> Dict[str, str]:
        last_day = self.start_date + timedelta(days=self.no_of_days - 1)
        return {
            "from_date": to_utc_string(self.start_date, START_OF_DAY, tz_name),
            "to_date": to_utc_string(last_day, END_OF_DAY, tz_name),
        }

    def to_price_query(self, tz_name: str = "UTC") -> Dict[str, Any]:
        return {
            **self._period(tz_name),
            "transport_service_id": self.transport_service_id,
            "cab_type_id": self.cab_type_id,
            "no_of_cabs": self.no_of_cabs,
        }

    def to_quote_item(self, tz_name: str = "UTC") -> Dict[str, Any]:
        return {
            **self.to_price_query(tz_name),
            "calculated_price": self.calculated_price,
            "given_price": self.given_price or 0,
            "comments": self.comments,
        }


# --- Price creation forms ---


class DateInterval(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_order(self) -> "DateInterval":
        if self.end_date < self.start_date:
            raise ValueError("End date should be on or after the start date")
        return self

    def to_payload(self, tz_name: str = "UTC") -> Dict[str, str]:
        return {
            "start_date": to_utc_string(self.start_date, START_OF_DAY, tz_name),
            "end_date": to_utc_string(self.end_date, END_OF_DAY, tz_name),
        }


class HotelPriceEntry(BaseModel):
    """One price applied to every location x meal plan x room type x interval."""

    intervals: List[DateInterval] = Field(min_length=1)
    base_price: PositiveFloat
    persons: PositiveInt = 2
    a_w_e_b: NonNegativeFloat = 0
    c_w_e_b: NonNegativeFloat = 0
    c_wo_e_b: NonNegativeFloat = 0
    location_ids: List[int] = Field(min_length=1)
    meal_plan_ids: List[int] = Field(min_length=1)
    room_type_ids: List[int] = Field(min_length=1)


class NewHotelPricesForm(BaseModel):
    prices: List[HotelPriceEntry] = Field(min_length=1)

    def to_payload(self, tz_name: str = "UTC") -> Dict[str, List[Dict[str, Any]]]:
        rows: List[Dict[str, Any]] = []
        for entry in self.prices:
            combinations = product(
                entry.location_ids, entry.meal_plan_ids, entry.room_type_ids, entry.intervals
            )
            for location_id, meal_plan_id, room_type_id, interval in combinations:
                rows.append(
                    {
                        **interval.to_payload(tz_name),
                        "base_price": entry.base_price,
                        "persons": entry.persons,
                        "adult_with_extra_bed_price": entry.a_w_e_b,
                        "child_with_extra_bed_price": entry.c_w_e_b,
                        "child_without_extra_bed_price": entry.c_wo_e_b,
                        "location_id": location_id,
                        "meal_plan_id": meal_plan_id,
                        "room_type_id": room_type_id,
                    }
                )
        return {"prices": rows}


class CabPriceEntry(BaseModel):
    start_date: date
    end_date: date
    cab_type_id: int
    transport_service_id: int
    price: Optional[NonNegativeFloat] = None
    per_km_charges: Optional[NonNegativeFloat] = None
    minimum_km_per_day: Optional[NonNegativeFloat] = None
    toll_charges: NonNegativeFloat = 0
    parking_charges: NonNegativeFloat = 0
    night_charges: NonNegativeFloat = 0

    def to_payload(self, tz_name: str = "UTC") -> Dict[str, Any]:
        payload = self.model_dump(exclude={"start_date", "end_date"}, exclude_none=True)
        payload["start_date"] = to_utc_string(self.start_date, START_OF_DAY, tz_name)
        payload["end_date"] = to_utc_string(self.end_date, END_OF_DAY, tz_name)
        return payload


class NewCabPricesForm(BaseModel):
    prices: List[CabPriceEntry] = Field(min_length=1)

    def to_payload(self, tz_name: str = "UTC") -> Dict[str, List[Dict[str, Any]]]:
        return {"prices": [entry.to_payload(tz_name) for entry in self.prices]}


async def save_hotel_prices(
    client: Any, hotel_id: int, form: NewHotelPricesForm, *, tz_name: str = "UTC"
) -> List[HotelPrice]:
    response = await client.post(f"/hotels/{hotel_id}/prices", form.to_payload(tz_name))
    return [HotelPrice.model_validate(raw) for raw in response.get("data") or []]


async def save_cab_prices(
    client: Any, form: NewCabPricesForm, *, tz_name: str = "UTC"
) -> List[TransportServicePrice]:
    response = await client.post("/cab-prices", form.to_payload(tz_name))
    return [TransportServicePrice.model_validate(raw) for raw in response.get("data") or []]
