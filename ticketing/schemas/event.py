"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=2000)
    date: str = Field(..., min_length=1, max_length=50)
    event_time: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    standard_price: Optional[str] = Field(None, max_length=50)
    vip_price: Optional[str] = Field(None, max_length=50)
    refreshments: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=1024)
    sponsor_logos: list[str] = Field(default_factory=list, max_length=10)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    date: Optional[str] = Field(None, min_length=1, max_length=50)
    event_time: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    standard_price: Optional[str] = Field(None, max_length=50)
    vip_price: Optional[str] = Field(None, max_length=50)
    refreshments: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=1024)
    sponsor_logos: Optional[list[str]] = Field(None, max_length=10)

    @field_validator("title", "description", "date", "sponsor_logos")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to keep it; these columns cannot be cleared
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    date: str
    event_time: Optional[str]
    category: Optional[str]
    address: Optional[str]
    location: Optional[str]
    standard_price: Optional[str]
    vip_price: Optional[str]
    refreshments: Optional[str]
    image_url: Optional[str]
    sponsor_logos: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class EventSnapshot(BaseModel):
    """Read-only view of an event joined onto bookings and tickets."""

    id: str
    title: str
    date: str
    event_time: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    standard_price: Optional[str] = None
    vip_price: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class EventDeleteResponse(BaseModel):
    message: str
    event_id: str
