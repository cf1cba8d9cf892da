"""
Booking record store.

UNIQUENESS STRATEGY: Constraint-enforced insert
===============================================

Problem:
  Ticket numbers are chosen by sampling and checking the database. Two
  requests can pick the same free number at the same time and both insert.

Solution:
  Uniqueness lives in the schema, not in application code:

  1. bookings.ticket_number carries a UNIQUE constraint
  2. issued_ticket_numbers has the ticket number as its primary key and is
     never pruned, so a number stays taken after its booking is deleted
  3. Both rows are inserted in the same transaction. If either violates its
     constraint the whole insert is rolled back and TicketNumberTaken is
     raised so the caller can retry with a new number.

  Any other database failure surfaces as StorageError.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import StorageError
from ticketing.core.logging import get_logger
from ticketing.models.booking import Booking, IssuedTicketNumber

logger = get_logger(__name__)


class TicketNumberTaken(Exception):
    """The ticket number was claimed by another booking between check and insert."""

    def __init__(self, ticket_number: str):
        super().__init__(ticket_number)
        self.ticket_number = ticket_number


TICKET_NUMBER_CONSTRAINTS = frozenset({"uq_bookings_ticket_number", "issued_ticket_numbers_pkey"})

# SQLite names the column instead of the constraint
TICKET_NUMBER_COLUMNS = ("bookings.ticket_number", "issued_ticket_numbers.ticket_number")


def _constraint_name(orig) -> Optional[str]:
    # asyncpg wraps the driver error, psycopg exposes it under diag
    for source in (orig, getattr(orig, "__cause__", None), getattr(orig, "diag", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return name
    return None


def _is_ticket_number_violation(exc: IntegrityError) -> bool:
    name = _constraint_name(exc.orig)
    if name is not None:
        return name in TICKET_NUMBER_CONSTRAINTS
    message = str(exc.orig)
    return message.startswith("UNIQUE constraint failed") and any(
        column in message for column in TICKET_NUMBER_COLUMNS
    )


class BookingStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @contextmanager
    def _storage_errors(self, operation: str, **context) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("booking_store_failed", operation=operation, error=str(exc), **context)
            raise StorageError("The booking store is unavailable. Please try again.") from exc

    async def ticket_number_exists(self, ticket_number: str) -> bool:
        with self._storage_errors("ticket_number_exists", ticket_number=ticket_number):
            result = await self.db.execute(
                select(IssuedTicketNumber.ticket_number).where(
                    IssuedTicketNumber.ticket_number == ticket_number
                )
            )
            return result.scalar_one_or_none() is not None

    async def insert(self, booking: Booking) -> Booking:
        """
        Persist a new booking and claim its ticket number atomically.

        Raises:
            TicketNumberTaken: the ticket number is already issued
            StorageError: any other persistence failure
        """
        self.db.add(IssuedTicketNumber(ticket_number=booking.ticket_number))
        self.db.add(booking)
        try:
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if _is_ticket_number_violation(exc):
                raise TicketNumberTaken(booking.ticket_number) from exc
            logger.error(
                "booking_insert_failed",
                booking_id=booking.id,
                ticket_number=booking.ticket_number,
                error=str(exc.orig),
            )
            raise StorageError("Booking could not be saved.") from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(
                "booking_insert_failed",
                booking_id=booking.id,
                ticket_number=booking.ticket_number,
                error=str(exc),
            )
            raise StorageError("Booking could not be saved.") from exc
        return booking

    async def get(self, booking_id: str) -> Optional[Booking]:
        with self._storage_errors("get", booking_id=booking_id):
            result = await self.db.execute(select(Booking).where(Booking.id == booking_id))
            return result.scalar_one_or_none()

    async def get_by_ticket_number(self, ticket_number: str) -> Optional[Booking]:
        with self._storage_errors("get_by_ticket_number", ticket_number=ticket_number):
            result = await self.db.execute(
                select(Booking).where(Booking.ticket_number == ticket_number)
            )
            return result.scalar_one_or_none()

    async def list_recent(self) -> list[Booking]:
        """All bookings, newest first."""
        with self._storage_errors("list_recent"):
            result = await self.db.execute(
                select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
            )
            return list(result.scalars().all())

    async def delete(self, booking: Booking) -> None:
        with self._storage_errors("delete", booking_id=booking.id, ticket_number=booking.ticket_number):
            await self.db.delete(booking)
            await self.db.commit()

    async def set_status(self, booking: Booking, status: str) -> Booking:
        with self._storage_errors("set_status", booking_id=booking.id, status=status):
            booking.status = status
            await self.db.commit()
            await self.db.refresh(booking)
            return booking
