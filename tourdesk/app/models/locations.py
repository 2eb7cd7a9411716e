"""Pydantic models for locations and geography."""

from typing import Optional

from pydantic import BaseModel

from tourdesk.app.store.model import Entity


class Country(BaseModel):
    id: int
    name: str
    short_name: Optional[str] = None
    dial_code: Optional[str] = None
    flag: Optional[str] = None


class CountryState(BaseModel):
    id: int
    name: str
    country_id: Optional[int] = None


class City(BaseModel):
    id: int
    name: str
    state_id: Optional[int] = None


class Location(Entity):
    """A named place hotels and transport services operate in."""

    name: str
    short_name: Optional[str] = None
    city_id: Optional[int] = None
    state_id: Optional[int] = None
    country_id: Optional[int] = None
    city: Optional[City] = None
    state: Optional[CountryState] = None
    country: Optional[Country] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None


class CountryDialCode(Entity):
    name: str
    dial_code: str
    iso: Optional[str] = None
