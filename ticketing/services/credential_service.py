"""
Ticket credential issuance: verification URL, QR code, rendered ticket and
hand-off to the mail transport.

The QR code encodes CLIENT_BASE_URL/verify-ticket/<ticket_number>, which the
front end resolves through the public verification endpoint. Error correction
is set to H so a creased or partly covered printout still scans.

A booking whose event has been deleted still gets a ticket: event fields are
rendered empty instead of failing the issuance.
"""

import base64
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

import anyio
import qrcode
from jinja2 import Environment, FileSystemLoader
from qrcode import constants

from ticketing.core.config import Settings
from ticketing.core.errors import DeliveryError
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_delivery
from ticketing.models.booking import Booking
from ticketing.schemas.event import EventSnapshot
from ticketing.services.interfaces.mail_transport import InlineImage, MailTransport

logger = get_logger(__name__)

DEFAULT_SUBJECT = "Your Ticket"
QR_CONTENT_ID = "ticket-qr"
QR_DISPLAY_SIZE = 140
QR_BOX_SIZE = 6
QR_BORDER = 1

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


@dataclass(frozen=True)
class Credential:
    ticket_number: str
    verification_url: str
    qr_png: bytes
    subject: str
    html: str

    @property
    def qr_data_uri(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.qr_png).decode("ascii")


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=constants.ERROR_CORRECT_H,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    image.save(buffer)
    return buffer.getvalue()


class CredentialIssuer:
    def __init__(self, client_base_url: str, mailer: MailTransport):
        self.client_base_url = client_base_url.rstrip("/")
        self.mailer = mailer
        self.jinja_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)

    @classmethod
    def from_settings(cls, settings: Settings, mailer: MailTransport) -> "CredentialIssuer":
        return cls(settings.CLIENT_BASE_URL, mailer)

    def verification_url(self, ticket_number: str) -> str:
        return f"{self.client_base_url}/verify-ticket/{ticket_number}"

    def render_ticket(
        self,
        booking: Booking,
        event: Optional[EventSnapshot],
        qr_src: str,
        message: Optional[str] = None,
    ) -> str:
        template = self.jinja_env.get_template("ticket.html")
        return template.render(
            event_title=event.title if event else "",
            event_date=event.date if event else "",
            event_time=(event.event_time or "") if event else "",
            event_location=(event.address or event.location or "") if event else "",
            ticket_number=booking.ticket_number,
            attendee_name=booking.full_name,
            ticket_type=booking.ticket_type,
            city_name=booking.city_name,
            qr_src=qr_src,
            qr_size=QR_DISPLAY_SIZE,
            message=message,
        )

    def build_credential(
        self,
        booking: Booking,
        event: Optional[EventSnapshot],
        subject: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Credential:
        url = self.verification_url(booking.ticket_number)
        qr_png = render_qr_png(url)
        html = self.render_ticket(booking, event, qr_src=f"cid:{QR_CONTENT_ID}", message=message)
        return Credential(
            ticket_number=booking.ticket_number,
            verification_url=url,
            qr_png=qr_png,
            subject=subject or DEFAULT_SUBJECT,
            html=html,
        )

    async def issue(
        self,
        booking: Booking,
        event: Optional[EventSnapshot],
        subject: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Credential:
        """
        Build the ticket and deliver it to the attendee.

        Raises:
            DeliveryError: the mail transport failed; nothing is retried
        """
        if event is None:
            logger.warning("credential_event_missing", booking_id=booking.id, event_id=booking.event_id)

        credential = await anyio.to_thread.run_sync(self.build_credential, booking, event, subject, message)

        try:
            await self.mailer.send(
                to=booking.email_address,
                subject=credential.subject,
                html=credential.html,
                inline_images=[
                    InlineImage(content_id=QR_CONTENT_ID, filename="ticket-qr.png", data=credential.qr_png)
                ],
            )
        except DeliveryError:
            record_delivery(False)
            logger.error(
                "credential_delivery_failed",
                booking_id=booking.id,
                ticket_number=booking.ticket_number,
            )
            raise

        record_delivery(True)
        logger.info(
            "credential_delivered",
            booking_id=booking.id,
            ticket_number=booking.ticket_number,
        )
        return credential
