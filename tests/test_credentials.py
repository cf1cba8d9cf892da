"""
Tests for ticket credential issuance: QR code, rendered ticket, delivery and
the SendGrid message it hands off.
"""

import base64
from io import BytesIO
from types import SimpleNamespace
from urllib.error import URLError

import pytest
from httpx import AsyncClient
from PIL import Image

from ticketing.core.errors import DeliveryError
from ticketing.models.booking import Booking
from ticketing.schemas.event import EventSnapshot
from ticketing.services.credential_service import (
    DEFAULT_SUBJECT,
    QR_CONTENT_ID,
    CredentialIssuer,
    render_qr_png,
)
from ticketing.services.interfaces.mail_transport import InlineImage
from ticketing.services.mail_service import SendGridMailer

from helpers import RecordingMailer, booking_form, receipt_file

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def make_booking(**overrides) -> Booking:
    fields = dict(
        id="b-1",
        ticket_number="482913",
        event_id="E1",
        first_name="Ana",
        last_name="Cruz",
        contact_number="+63 912 345 6789",
        email_address="ana@example.com",
        city_name="Quezon City",
        ticket_type="VIP",
        status="Paid",
        receipt_image="https://media.example.com/uploads/receipts/r.png",
    )
    fields.update(overrides)
    return Booking(**fields)


EVENT = EventSnapshot(
    id="E1",
    title="Test Concert",
    date="2026-12-05",
    event_time="7:00 PM - 10:00 PM",
    address="Test Venue, 1 Main St",
)


async def create_booking(client: AsyncClient) -> dict:
    response = await client.post("/api/v1/bookings/", data=booking_form(), files=receipt_file())
    assert response.status_code == 201
    return response.json()


def test_render_qr_png():
    png = render_qr_png("https://tickets.example.com/verify-ticket/482913")
    assert png.startswith(PNG_SIGNATURE)

    image = Image.open(BytesIO(png))
    assert image.width == image.height
    assert image.width >= 100


def test_verification_url_trims_trailing_slash():
    issuer = CredentialIssuer("https://tickets.example.com/", RecordingMailer())
    assert issuer.verification_url("482913") == "https://tickets.example.com/verify-ticket/482913"


def test_build_credential():
    issuer = CredentialIssuer("https://tickets.example.com", RecordingMailer())
    credential = issuer.build_credential(make_booking(), EVENT)

    assert credential.subject == DEFAULT_SUBJECT
    assert credential.verification_url == "https://tickets.example.com/verify-ticket/482913"
    assert credential.qr_png.startswith(PNG_SIGNATURE)
    assert base64.b64decode(credential.qr_data_uri.split(",", 1)[1]) == credential.qr_png
    assert "Test Concert" in credential.html
    assert "Your Entry Pass" in credential.html
    assert "Ana Cruz" in credential.html
    assert "482913" in credential.html
    assert f"cid:{QR_CONTENT_ID}" in credential.html


def test_build_credential_without_event():
    """A deleted event leaves the event fields empty instead of failing."""
    issuer = CredentialIssuer("https://tickets.example.com", RecordingMailer())
    credential = issuer.build_credential(make_booking(), None)

    assert "Ana Cruz" in credential.html
    assert "Test Concert" not in credential.html
    assert "<strong>Location:</strong> </p>" in credential.html


def test_ticket_html_is_escaped():
    issuer = CredentialIssuer("https://tickets.example.com", RecordingMailer())
    credential = issuer.build_credential(make_booking(first_name="<script>"), EVENT, message="<b>hi</b>")

    assert "<script>" not in credential.html
    assert "&lt;script&gt;" in credential.html
    assert "&lt;b&gt;hi&lt;/b&gt;" in credential.html


@pytest.mark.asyncio
async def test_issue_sends_inline_qr():
    mailer = RecordingMailer()
    issuer = CredentialIssuer("https://tickets.example.com", mailer)

    credential = await issuer.issue(make_booking(), EVENT, subject="See you there")

    [sent] = mailer.sent
    assert sent["to"] == "ana@example.com"
    assert sent["subject"] == "See you there"
    [image] = sent["inline_images"]
    assert image.content_id == QR_CONTENT_ID
    assert image.data == credential.qr_png


@pytest.mark.asyncio
async def test_issue_endpoint(client: AsyncClient, admin_headers, test_event, mailer):
    booking = await create_booking(client)

    response = await client.post(f"/api/v1/bookings/{booking['id']}/issue", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Email sent successfully"
    assert data["ticket_number"] == booking["ticket_number"]
    assert data["verification_url"] == f"https://tickets.example.com/verify-ticket/{booking['ticket_number']}"
    assert data["qr_code"].startswith("data:image/png;base64,")

    [sent] = mailer.sent
    assert sent["subject"] == "Your Ticket"
    assert "Test Concert" in sent["html"]


@pytest.mark.asyncio
async def test_issue_endpoint_custom_message(client: AsyncClient, admin_headers, test_event, mailer):
    booking = await create_booking(client)

    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/issue",
        json={"subject": "Gate opens at 6", "message": "Bring a valid ID."},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert mailer.sent[0]["subject"] == "Gate opens at 6"
    assert "Bring a valid ID." in mailer.sent[0]["html"]


@pytest.mark.asyncio
async def test_issue_endpoint_event_deleted(client: AsyncClient, admin_headers, test_event, mailer):
    booking = await create_booking(client)
    await client.delete("/api/v1/events/E1", headers=admin_headers)

    response = await client.post(f"/api/v1/bookings/{booking['id']}/issue", headers=admin_headers)

    assert response.status_code == 200
    assert "Test Concert" not in mailer.sent[0]["html"]


@pytest.mark.asyncio
async def test_issue_endpoint_delivery_failure(client: AsyncClient, admin_headers, test_event, mailer):
    booking = await create_booking(client)
    mailer.fail = True

    response = await client.post(f"/api/v1/bookings/{booking['id']}/issue", headers=admin_headers)

    assert response.status_code == 502
    assert response.json() == {"detail": "Email sending failed.", "code": "delivery-error"}


@pytest.mark.asyncio
async def test_issue_endpoint_unknown_booking(client: AsyncClient, admin_headers):
    response = await client.post("/api/v1/bookings/nope/issue", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_issue_endpoint_requires_admin(client: AsyncClient, test_event):
    booking = await create_booking(client)
    response = await client.post(f"/api/v1/bookings/{booking['id']}/issue")
    assert response.status_code == 401


def test_sendgrid_message_has_inline_attachment():
    mailer = SendGridMailer("SG.test", "tickets@example.com", "Box Office")
    message = mailer.build_message(
        "ana@example.com",
        "Your Ticket",
        "<p>hi</p>",
        [InlineImage(content_id="ticket-qr", filename="ticket-qr.png", data=PNG_SIGNATURE)],
    )

    payload = message.get()
    [attachment] = payload["attachments"]
    assert attachment["content_id"] == "ticket-qr"
    assert attachment["disposition"] == "inline"
    assert attachment["type"] == "image/png"
    assert base64.b64decode(attachment["content"]) == PNG_SIGNATURE
    assert payload["from"] == {"email": "tickets@example.com", "name": "Box Office"}


@pytest.mark.asyncio
async def test_sendgrid_without_api_key():
    mailer = SendGridMailer(None, "tickets@example.com", "Box Office")
    with pytest.raises(DeliveryError, match="not configured"):
        await mailer.send("ana@example.com", "Your Ticket", "<p>hi</p>")


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome", [SimpleNamespace(status_code=500), URLError("unreachable")])
async def test_sendgrid_failures_become_delivery_errors(outcome):
    def send(message):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    mailer = SendGridMailer("SG.test", "tickets@example.com", "Box Office")
    mailer._client = SimpleNamespace(send=send)

    with pytest.raises(DeliveryError, match="Email sending failed."):
        await mailer.send("ana@example.com", "Your Ticket", "<p>hi</p>")


@pytest.mark.asyncio
async def test_sendgrid_accepted():
    mailer = SendGridMailer("SG.test", "tickets@example.com", "Box Office")
    mailer._client = SimpleNamespace(send=lambda message: SimpleNamespace(status_code=202))

    await mailer.send("ana@example.com", "Your Ticket", "<p>hi</p>")
