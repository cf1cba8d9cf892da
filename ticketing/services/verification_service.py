"""
Ticket verification for gate staff.

A scanned ticket number is either a real, current booking or it is not.
"Not" is a normal answer, never an error: malformed numbers, unknown numbers
and numbers whose booking was deleted all come back as valid=False.

Verification is a pure read. Tickets are not marked as used, so the same
ticket can be rescanned at the gate as often as needed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_verification
from ticketing.schemas.booking import VerificationResponse
from ticketing.services.booking_service import to_detail
from ticketing.services.booking_store import BookingStore
from ticketing.services.event_service import get_event_snapshot
from ticketing.services.ticket_number import is_ticket_number

logger = get_logger(__name__)

INVALID_MESSAGE = "Invalid ticket. No matching record found."
VALID_MESSAGE = "Ticket is valid"


async def verify_ticket(db: AsyncSession, ticket_number: str) -> VerificationResponse:
    ticket_number = (ticket_number or "").strip()

    if not is_ticket_number(ticket_number):
        record_verification(False)
        logger.info("ticket_rejected", reason="malformed")
        return VerificationResponse(valid=False, message=INVALID_MESSAGE)

    booking = await BookingStore(db).get_by_ticket_number(ticket_number)
    if booking is None:
        record_verification(False)
        logger.info("ticket_rejected", reason="unknown", ticket_number=ticket_number)
        return VerificationResponse(valid=False, message=INVALID_MESSAGE)

    event = await get_event_snapshot(db, booking.event_id)
    record_verification(True)
    logger.info(
        "ticket_verified",
        ticket_number=ticket_number,
        booking_id=booking.id,
        status=booking.status,
        event_found=event is not None,
    )
    return VerificationResponse(valid=True, message=VALID_MESSAGE, booking=to_detail(booking, event))
