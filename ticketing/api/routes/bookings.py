"""
Booking endpoints: public creation and verification, admin-only management
and ticket issuance.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.api.deps import get_credential_issuer, get_media_storage, get_ticket_number_generator
from ticketing.core.config import Settings, get_settings
from ticketing.core.errors import TicketingError
from ticketing.core.security import get_current_admin_id
from ticketing.db.session import get_db
from ticketing.schemas.booking import (
    AttendeeDetails,
    BookingDeleteResponse,
    BookingDetail,
    BookingResponse,
    BookingStatusUpdate,
    CredentialIssueRequest,
    CredentialIssueResponse,
    VerificationResponse,
)
from ticketing.services.booking_service import (
    create_booking,
    delete_booking,
    get_booking,
    get_booking_detail,
    list_bookings,
    update_booking_status,
    validate_booking_input,
)
from ticketing.services.credential_service import CredentialIssuer
from ticketing.services.event_service import get_event_snapshot
from ticketing.services.interfaces.media_storage import MediaStorage
from ticketing.services.media_storage import RECEIPTS, read_upload
from ticketing.services.ticket_number import TicketNumberGenerator
from ticketing.services.verification_service import verify_ticket

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    first_name: str = Form(...),
    last_name: str = Form(...),
    contact_number: str = Form(...),
    email_address: str = Form(...),
    city_name: str = Form(...),
    ticket_type: str = Form(...),
    event_id: str = Form(...),
    receipt_image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    generator: TicketNumberGenerator = Depends(get_ticket_number_generator),
    settings: Settings = Depends(get_settings),
):
    """
    Submit a booking with proof of payment.

    The receipt is stored first, then a unique 6-digit ticket number is
    allocated. Status starts as Pending until an admin confirms payment.
    A receipt whose booking could not be created is removed again.
    """
    attendee = AttendeeDetails(
        first_name=first_name,
        last_name=last_name,
        contact_number=contact_number,
        email_address=email_address,
        city_name=city_name,
    )
    # Reject bad input before anything is written to receipt storage
    validate_booking_input(attendee, ticket_type, event_id)

    receipt_ref = await storage.save(
        RECEIPTS,
        receipt_image.filename or "",
        receipt_image.content_type or "",
        await read_upload(receipt_image),
    )
    try:
        return await create_booking(
            db,
            attendee,
            ticket_type,
            event_id,
            receipt_ref,
            generator,
            max_attempts=settings.BOOKING_CREATE_MAX_ATTEMPTS,
        )
    except TicketingError:
        # No booking points at the receipt: remove it before reporting the failure
        await storage.delete(receipt_ref)
        raise


@router.get("/", response_model=list[BookingDetail])
async def list_bookings_endpoint(
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
):
    """All bookings, newest first, with their event where it still exists."""
    return await list_bookings(db)


@router.get("/verify/{ticket_number}", response_model=VerificationResponse)
async def verify_ticket_endpoint(ticket_number: str, db: AsyncSession = Depends(get_db)):
    """
    Public gate check for a scanned ticket number.
    Unknown or malformed numbers return valid=false, never an error.
    """
    return await verify_ticket(db, ticket_number)


@router.get("/{booking_id}", response_model=BookingDetail)
async def get_booking_endpoint(
    booking_id: str,
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking_detail(db, booking_id)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
async def delete_booking_endpoint(
    booking_id: str,
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete a booking. Its ticket number is never reissued."""
    await delete_booking(db, booking_id)
    return BookingDeleteResponse(message="Booking deleted successfully", booking_id=booking_id)


@router.api_route("/{booking_id}/status", methods=["PUT", "PATCH"], response_model=BookingResponse)
async def update_status_endpoint(
    booking_id: str,
    payload: BookingStatusUpdate,
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
):
    """Set status to Pending, Paid, Unpaid or Cancelled. Any transition is allowed."""
    return await update_booking_status(db, booking_id, payload.status)


@router.post("/{booking_id}/issue", response_model=CredentialIssueResponse)
async def issue_ticket_endpoint(
    booking_id: str,
    payload: Optional[CredentialIssueRequest] = None,
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
):
    """Render the ticket with its QR code and email it to the attendee."""
    booking = await get_booking(db, booking_id)
    event = await get_event_snapshot(db, booking.event_id)
    payload = payload or CredentialIssueRequest()

    credential = await issuer.issue(booking, event, subject=payload.subject, message=payload.message)
    return CredentialIssueResponse(
        message="Email sent successfully",
        booking_id=booking.id,
        ticket_number=credential.ticket_number,
        verification_url=credential.verification_url,
        qr_code=credential.qr_data_uri,
    )
