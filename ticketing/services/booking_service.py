"""
Booking lifecycle: creation with collision-safe ticket numbers, lookup,
listing, deletion and status transitions.

CONCURRENCY STRATEGY: Constraint-backed retry
=============================================

Problem:
  Two attendees book at the same moment. The generator samples a number,
  sees it unused, and hands it to both requests before either has written.
  Result: two tickets with one QR code.

Solution:
  1. Generator picks a number the issued_ticket_numbers registry does not hold
  2. BookingStore inserts booking + registry row in one transaction
  3. If the unique constraint fires, the transaction is rolled back and the
     whole creation is retried with a new number and a new record

  This approach:
  - No application locks, no SELECT FOR UPDATE on a hot table
  - The database constraint is the only thing that decides who wins
  - Bounded: BOOKING_CREATE_MAX_ATTEMPTS insert races, then a 409

Status transitions:
  Status is a flat enum (Pending, Paid, Unpaid, Cancelled). Any value is
  reachable from any other so operators can correct mistakes either way.
  Only membership in the enum is enforced.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import (
    CapacityExhaustedError,
    ConflictError,
    InvalidStatusError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ticketing.core.logging import get_logger
from ticketing.core.metrics import (
    booking_creation_latency,
    record_booking_creation,
    record_collision,
    status_transitions,
)
from ticketing.db.base import new_id
from ticketing.models.booking import Booking, BookingStatus, TicketType
from ticketing.schemas.booking import AttendeeDetails, BookingDetail, BookingResponse
from ticketing.schemas.event import EventSnapshot
from ticketing.services.booking_store import BookingStore, TicketNumberTaken
from ticketing.services.event_service import get_event_snapshot, get_event_snapshots
from ticketing.services.ticket_number import TicketNumberGenerator

logger = get_logger(__name__)

MAX_CREATE_ATTEMPTS = 5

ATTENDEE_FIELDS = {
    "first_name": "First name",
    "last_name": "Last name",
    "contact_number": "Contact number",
    "email_address": "Email address",
    "city_name": "City",
}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_booking_input(attendee: AttendeeDetails, ticket_type: str, event_id: str) -> TicketType:
    """
    Check presence of every required field before anything is stored.
    Returns the parsed ticket type.
    """
    missing = [label for field, label in ATTENDEE_FIELDS.items() if _is_blank(getattr(attendee, field))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if _is_blank(event_id):
        raise ValidationError("Event id is required")

    try:
        return TicketType(ticket_type)
    except ValueError:
        allowed = ", ".join(t.value for t in TicketType)
        raise ValidationError(f"Invalid ticket type {ticket_type!r}. Allowed: {allowed}")


def to_detail(booking: Booking, event: Optional[EventSnapshot]) -> BookingDetail:
    return BookingDetail(**BookingResponse.model_validate(booking).model_dump(), event=event)


async def create_booking(
    db: AsyncSession,
    attendee: AttendeeDetails,
    ticket_type: str,
    event_id: str,
    receipt_image: str,
    generator: TicketNumberGenerator,
    max_attempts: int = MAX_CREATE_ATTEMPTS,
) -> Booking:
    """
    Create a Pending booking with a freshly allocated ticket number.
    Retries up to max_attempts when another booking claims the number first.
    """
    parsed_type = validate_booking_input(attendee, ticket_type, event_id)
    if _is_blank(receipt_image):
        raise ValidationError("Receipt image is required")

    store = BookingStore(db)

    with booking_creation_latency.time():
        for attempt in range(1, max_attempts + 1):
            try:
                ticket_number = await generator.generate(store)
            except CapacityExhaustedError:
                record_booking_creation("capacity_exhausted")
                raise

            booking = Booking(
                id=new_id(),
                ticket_number=ticket_number,
                event_id=event_id.strip(),
                first_name=attendee.first_name.strip(),
                last_name=attendee.last_name.strip(),
                contact_number=attendee.contact_number.strip(),
                email_address=attendee.email_address.strip(),
                city_name=attendee.city_name.strip(),
                ticket_type=parsed_type.value,
                status=BookingStatus.PENDING.value,
                receipt_image=receipt_image,
            )

            try:
                await store.insert(booking)
            except TicketNumberTaken:
                record_collision("insert")
                logger.info(
                    "booking_retry",
                    event_id=event_id,
                    attempt=attempt,
                    reason="ticket_number_taken",
                    ticket_number=ticket_number,
                )
                continue
            except StorageError:
                record_booking_creation("error")
                raise

            record_booking_creation("success")
            logger.info(
                "booking_created",
                booking_id=booking.id,
                ticket_number=booking.ticket_number,
                event_id=booking.event_id,
                ticket_type=booking.ticket_type,
                attempt=attempt,
            )
            return booking

    record_booking_creation("conflict")
    logger.warning("booking_create_conflict", event_id=event_id, attempts=max_attempts)
    raise ConflictError("Booking failed due to high demand. Please try again.")


async def get_booking(db: AsyncSession, booking_id: str) -> Booking:
    booking = await BookingStore(db).get(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def get_booking_detail(db: AsyncSession, booking_id: str) -> BookingDetail:
    booking = await get_booking(db, booking_id)
    return to_detail(booking, await get_event_snapshot(db, booking.event_id))


async def list_bookings(db: AsyncSession) -> list[BookingDetail]:
    """All bookings newest first, each joined with its event where it still exists."""
    bookings = await BookingStore(db).list_recent()
    events = await get_event_snapshots(db, {b.event_id for b in bookings})
    return [to_detail(b, events.get(b.event_id)) for b in bookings]


async def delete_booking(db: AsyncSession, booking_id: str) -> Booking:
    """
    Hard delete. The ticket number stays in the issued registry and is
    never handed out again.
    """
    store = BookingStore(db)
    booking = await get_booking(db, booking_id)
    await store.delete(booking)

    logger.info("booking_deleted", booking_id=booking_id, ticket_number=booking.ticket_number)
    return booking


async def update_booking_status(db: AsyncSession, booking_id: str, new_status: str) -> Booking:
    try:
        status = BookingStatus(new_status)
    except ValueError:
        raise InvalidStatusError(new_status)

    booking = await get_booking(db, booking_id)
    previous = booking.status
    await BookingStore(db).set_status(booking, status.value)

    status_transitions.labels(status=status.value).inc()
    logger.info(
        "booking_status_updated",
        booking_id=booking_id,
        ticket_number=booking.ticket_number,
        previous=previous,
        status=status.value,
    )
    return booking
