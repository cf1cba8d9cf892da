from ticketing.models.admin import Admin
from ticketing.models.event import Event
from ticketing.models.booking import Booking, BookingStatus, IssuedTicketNumber, TicketType

__all__ = ["Admin", "Event", "Booking", "BookingStatus", "IssuedTicketNumber", "TicketType"]
