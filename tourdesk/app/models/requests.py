"""Request bodies accepted by the console API."""

from typing import List

from pydantic import BaseModel, Field

from tourdesk.app.pricing.forms import CabPriceQuery, HotelPriceQuery


class Credentials(BaseModel):
    email: str
    password: str


class HotelRowsRequest(BaseModel):
    rows: List[HotelPriceQuery] = Field(min_length=1)


class CabRowsRequest(BaseModel):
    rows: List[CabPriceQuery] = Field(min_length=1)


class QuoteRequest(BaseModel):
    """Calculator rows of a new trip quote; given prices may be overridden."""

    hotels: List[HotelPriceQuery] = Field(default_factory=list)
    cabs: List[CabPriceQuery] = Field(default_factory=list)
    comments: str = ""


class MarkAsReadRequest(BaseModel):
    ids: List[int] = Field(min_length=1)
