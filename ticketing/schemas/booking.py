"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ticketing.schemas.event import EventSnapshot


class AttendeeDetails(BaseModel):
    first_name: str
    last_name: str
    contact_number: str
    email_address: str
    city_name: str


class BookingResponse(BaseModel):
    id: str
    ticket_number: str
    event_id: str
    first_name: str
    last_name: str
    contact_number: str
    email_address: str
    city_name: str
    ticket_type: str
    status: str
    receipt_image: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingDetail(BookingResponse):
    event: Optional[EventSnapshot] = None


class BookingStatusUpdate(BaseModel):
    # Plain string: out-of-enum values are rejected as invalid-status by the service
    status: str


class BookingDeleteResponse(BaseModel):
    message: str
    booking_id: str


class VerificationResponse(BaseModel):
    valid: bool
    message: str
    booking: Optional[BookingDetail] = None


class CredentialIssueRequest(BaseModel):
    subject: Optional[str] = Field(None, max_length=200)
    message: Optional[str] = Field(None, max_length=2000)


class CredentialIssueResponse(BaseModel):
    message: str
    booking_id: str
    ticket_number: str
    verification_url: str
    qr_code: str
