"""Pydantic models for hotels, their prices and booking preferences."""

from typing import List, Optional

from pydantic import BaseModel, Field

from tourdesk.app.models.accounts import Contact
from tourdesk.app.models.locations import Location
from tourdesk.app.store.model import Entity


class MealPlan(Entity):
    name: str
    description: Optional[str] = None


class RoomType(Entity):
    name: str
    description: Optional[str] = None


class HotelRoomType(RoomType):
    allowed_extra_beds: int = 0


class HotelPaymentPreferenceBreakdown(BaseModel):
    """Share of a hotel payment due ``day_offset`` days from a reference date."""

    id: int
    reference_name: str
    day_offset: int
    amount_share: float
    name: Optional[str] = None


class HotelPaymentPreference(Entity):
    name: str
    breakdowns: List[HotelPaymentPreferenceBreakdown] = Field(default_factory=list)


class HotelBookingStage(Entity):
    name: str
    description: Optional[str] = None
    state: Optional[int] = None


class HotelPrice(Entity):
    hotel_id: int
    base_price: float
    persons: Optional[int] = None
    adult_with_extra_bed_price: float = 0
    child_with_extra_bed_price: float = 0
    child_without_extra_bed_price: float = 0
    start_date: str
    end_date: str
    meal_plan_id: Optional[int] = None
    room_type_id: Optional[int] = None
    location_id: Optional[int] = None
    meal_plan: Optional[MealPlan] = None
    room_type: Optional[RoomType] = None


class Hotel(Entity):
    name: str
    stars: Optional[int] = None
    extra_bed_child_age_start: Optional[int] = None
    extra_bed_child_age_end: Optional[int] = None
    meal_plans: List[MealPlan] = Field(default_factory=list)
    room_types: List[HotelRoomType] = Field(default_factory=list)
    location: Optional[Location] = None
    prices: Optional[List[HotelPrice]] = None
    contacts: Optional[List[Contact]] = None
    payment_preference: Optional[HotelPaymentPreference] = None


class ExtraService(Entity):
    name: str
    description: Optional[str] = None
