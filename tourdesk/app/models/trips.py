"""Pydantic models for trips, quotes and trip requests."""

from typing import List, Optional

from pydantic import BaseModel, Field

from tourdesk.app.models.accounts import Contact, User
from tourdesk.app.models.hotels import Hotel, HotelBookingStage, HotelRoomType, MealPlan
from tourdesk.app.models.locations import Location
from tourdesk.app.models.transport import CabType, TransportLocation, TransportService
from tourdesk.app.store.model import Entity


class TripSource(Entity):
    name: str
    short_name: Optional[str] = None


class TripStage(Entity):
    name: str
    description: Optional[str] = None


class QuoteHotel(BaseModel):
    id: Optional[int] = None
    quote_id: Optional[int] = None
    checkin: str
    checkout: str
    hotel_id: int
    location_id: Optional[int] = None
    hotel: Optional[Hotel] = None
    meal_plan_id: int
    meal_plan: Optional[MealPlan] = None
    room_type_id: int
    room_type: Optional[HotelRoomType] = None
    adults_with_extra_bed: int = 0
    children_with_extra_bed: int = 0
    children_without_extra_bed: int = 0
    no_of_rooms: int = 1
    calculated_price: Optional[float] = None
    given_price: float = 0
    comments: str = ""
    booking_stages: List[HotelBookingStage] = Field(default_factory=list)


class QuoteCab(BaseModel):
    id: Optional[int] = None
    quote_id: Optional[int] = None
    from_date: str
    to_date: str
    cab_type_id: int
    cab_type: Optional[CabType] = None
    transport_service_id: int
    transport_service: Optional[TransportService] = None
    cab_locality: Optional[TransportLocation] = None
    no_of_cabs: int = 1
    calculated_price: Optional[float] = None
    given_price: float = 0
    comments: str = ""


class Quote(Entity):
    trip_id: int
    total_price: float
    given_price: Optional[float] = None
    comments: str = ""
    hotels: List[QuoteHotel] = Field(default_factory=list)
    cabs: List[QuoteCab] = Field(default_factory=list)
    created_by: Optional[User] = None
    created_at: Optional[str] = None


class GivenQuote(Entity):
    quote_id: int
    quote: Optional[Quote] = None
    given_price: float
    comments: Optional[str] = None
    created_by: Optional[User] = None
    created_at: Optional[str] = None
    locations: List[Location] = Field(default_factory=list)


class Trip(Entity):
    trip_id: Optional[str] = None
    start_date: str
    end_date: str
    no_of_adults: int = 1
    children: Optional[str] = None
    locations: List[Location] = Field(default_factory=list)
    trip_source: Optional[TripSource] = None
    quotes: List[Quote] = Field(default_factory=list)
    latest_given_quote: Optional[GivenQuote] = None
    contact: Optional[Contact] = None
    stages: List[TripStage] = Field(default_factory=list)
    latest_stage: Optional[TripStage] = None
    converted_at: Optional[str] = None
    created_by: Optional[User] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TripPlanRequest(Entity):
    name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    destination: Optional[str] = None
    start_date: Optional[str] = None
    no_of_days: Optional[int] = None
    no_of_adults: Optional[int] = None
    no_of_children: Optional[int] = None
    comments: Optional[str] = None
    trip: Optional[Trip] = None
    created_at: Optional[str] = None
