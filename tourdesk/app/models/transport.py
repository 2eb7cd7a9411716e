"""Pydantic models for cabs and transport services."""

from typing import List, Optional

from pydantic import Field

from tourdesk.app.models.locations import Location
from tourdesk.app.store.model import Entity


class CabType(Entity):
    name: str
    capacity: Optional[int] = None


class Cab(Entity):
    name: str
    number_plate: str
    cab_type: Optional[CabType] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TransportService(Entity):
    name: str
    distance: Optional[float] = None
    locations: List[Location] = Field(default_factory=list)


class TransportServicePrice(Entity):
    start_date: str
    end_date: str
    cab_type_id: int
    transport_service_id: int
    cab_type: Optional[CabType] = None
    transport_service: Optional[TransportService] = None
    price: Optional[float] = None
    per_km_charges: Optional[float] = None
    minimum_km_per_day: Optional[float] = None
    toll_charges: float = 0
    parking_charges: float = 0
    night_charges: float = 0


class TransportLocation(Entity):
    name: str
    short_name: Optional[str] = None
