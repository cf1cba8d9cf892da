"""
Booking model: one attendee's claim to entry.

Key design decisions:
- Unique constraint on ticket_number is the only guard against duplicate
  ticket numbers under concurrent creation
- issued_ticket_numbers keeps every number ever handed out, so a hard delete
  of a booking never frees its number for reuse
- event_id is a plain reference, not a foreign key: the event may be deleted
  while bookings for it remain
"""

import enum

from sqlalchemy import Column, String, DateTime, UniqueConstraint, CheckConstraint, func

from ticketing.db.base import Base, TimestampMixin, new_id, utcnow


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    UNPAID = "Unpaid"
    CANCELLED = "Cancelled"


class TicketType(str, enum.Enum):
    STANDARD = "Standard"
    VIP = "VIP"


def _in_list(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_id)
    ticket_number = Column(String(6), nullable=False)
    event_id = Column(String(64), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    contact_number = Column(String(50), nullable=False)
    email_address = Column(String(255), nullable=False)
    city_name = Column(String(100), nullable=False)

    ticket_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    receipt_image = Column(String(1024), nullable=False)

    __table_args__ = (
        UniqueConstraint("ticket_number", name="uq_bookings_ticket_number"),
        CheckConstraint(f"status IN ({_in_list(BookingStatus)})", name="check_booking_status"),
        CheckConstraint(f"ticket_type IN ({_in_list(TicketType)})", name="check_booking_ticket_type"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, ticket={self.ticket_number}, event={self.event_id}, status={self.status})>"


class IssuedTicketNumber(Base):
    """Append-only registry of every ticket number ever assigned."""

    __tablename__ = "issued_ticket_numbers"

    ticket_number = Column(String(6), primary_key=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    def __repr__(self) -> str:
        return f"<IssuedTicketNumber({self.ticket_number})>"
