"""
Shared test doubles and request builders.
"""

from typing import Sequence

from ticketing.core.errors import DeliveryError
from ticketing.schemas.booking import AttendeeDetails
from ticketing.services.interfaces.mail_transport import InlineImage, MailTransport
from ticketing.services.ticket_number import TicketNumberGenerator

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class RecordingMailer(MailTransport):
    """Mail transport that keeps messages in memory instead of sending them."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str, inline_images: Sequence[InlineImage] = ()) -> None:
        if self.fail:
            raise DeliveryError("Email sending failed.")
        self.sent.append({"to": to, "subject": subject, "html": html, "inline_images": list(inline_images)})


class SequenceGenerator(TicketNumberGenerator):
    """Hands out ticket numbers from a fixed list without checking the store.

    The last number repeats once the list runs out.
    """

    def __init__(self, numbers):
        super().__init__(max_attempts=1)
        self.numbers = list(numbers)
        self.calls = 0

    async def generate(self, store) -> str:
        self.calls += 1
        return self.numbers.pop(0) if len(self.numbers) > 1 else self.numbers[0]


def attendee(**overrides) -> AttendeeDetails:
    fields = {
        "first_name": "Ana",
        "last_name": "Cruz",
        "contact_number": "+63 912 345 6789",
        "email_address": "ana@example.com",
        "city_name": "Quezon City",
    }
    fields.update(overrides)
    return AttendeeDetails(**fields)


def booking_form(event_id: str = "E1", **overrides) -> dict:
    form = {
        "first_name": "Ana",
        "last_name": "Cruz",
        "contact_number": "+63 912 345 6789",
        "email_address": "ana@example.com",
        "city_name": "Quezon City",
        "ticket_type": "VIP",
        "event_id": event_id,
    }
    form.update(overrides)
    return form


def receipt_file(name: str = "r.png", content: bytes = PNG_BYTES, content_type: str = "image/png") -> dict:
    return {"receipt_image": (name, content, content_type)}
