from ticketing.schemas.admin import AdminCreate, AdminResponse, AdminLogin, Token
from ticketing.schemas.event import EventCreate, EventUpdate, EventResponse, EventSnapshot
from ticketing.schemas.booking import (
    AttendeeDetails,
    BookingResponse,
    BookingDetail,
    BookingStatusUpdate,
    VerificationResponse,
    CredentialIssueRequest,
    CredentialIssueResponse,
)

__all__ = [
    "AdminCreate", "AdminResponse", "AdminLogin", "Token",
    "EventCreate", "EventUpdate", "EventResponse", "EventSnapshot",
    "AttendeeDetails", "BookingResponse", "BookingDetail", "BookingStatusUpdate",
    "VerificationResponse", "CredentialIssueRequest", "CredentialIssueResponse",
]
