"""
SendGrid mail transport.

The SendGrid client is blocking, so each send runs in a worker thread and is
bounded by MAIL_TIMEOUT_SECONDS. Failures are not retried here; the operator
re-issues the ticket if delivery failed.
"""

import base64
from typing import Optional, Sequence
from urllib.error import URLError

import anyio
from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import (
    Attachment,
    ContentId,
    Disposition,
    FileContent,
    FileName,
    FileType,
    From,
    Mail,
    To,
)

from ticketing.core.config import Settings
from ticketing.core.errors import DeliveryError
from ticketing.core.logging import get_logger
from ticketing.services.interfaces.mail_transport import InlineImage, MailTransport

logger = get_logger(__name__)

ACCEPTED_STATUS_CODES = (200, 201, 202)


class SendGridMailer(MailTransport):
    def __init__(
        self,
        api_key: Optional[str],
        from_email: str,
        from_name: str,
        timeout_seconds: float = 15.0,
    ):
        self.from_email = from_email
        self.from_name = from_name
        self.timeout_seconds = timeout_seconds
        self._client = SendGridAPIClient(api_key=api_key) if api_key else None

        if self._client is None:
            logger.warning("mail_transport_disabled", reason="SENDGRID_API_KEY not set")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridMailer":
        return cls(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.MAIL_FROM_EMAIL,
            from_name=settings.MAIL_FROM_NAME,
            timeout_seconds=settings.MAIL_TIMEOUT_SECONDS,
        )

    def build_message(
        self,
        to: str,
        subject: str,
        html: str,
        inline_images: Sequence[InlineImage] = (),
    ) -> Mail:
        # HTML only: a plain-text alternative makes some clients drop the inline QR image
        message = Mail(
            from_email=From(self.from_email, self.from_name),
            to_emails=To(to),
            subject=subject,
            html_content=html,
        )
        for image in inline_images:
            message.add_attachment(
                Attachment(
                    FileContent(base64.b64encode(image.data).decode("ascii")),
                    FileName(image.filename),
                    FileType(image.mime_type),
                    Disposition("inline"),
                    ContentId(image.content_id),
                )
            )
        return message

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        inline_images: Sequence[InlineImage] = (),
    ) -> None:
        if self._client is None:
            raise DeliveryError("Email delivery is not configured.")

        message = self.build_message(to, subject, html, inline_images)
        try:
            with anyio.fail_after(self.timeout_seconds):
                response = await anyio.to_thread.run_sync(
                    self._client.send, message, abandon_on_cancel=True
                )
        except TimeoutError as exc:
            logger.error("mail_send_timeout", to=to, timeout=self.timeout_seconds)
            raise DeliveryError("Email sending failed.") from exc
        except HTTPError as exc:
            logger.error("mail_send_rejected", to=to, status_code=exc.status_code, body=str(exc.body))
            raise DeliveryError("Email sending failed.") from exc
        except (URLError, OSError) as exc:
            logger.error("mail_send_unreachable", to=to, error=str(exc))
            raise DeliveryError("Email sending failed.") from exc

        if response.status_code not in ACCEPTED_STATUS_CODES:
            logger.error("mail_send_rejected", to=to, status_code=response.status_code)
            raise DeliveryError("Email sending failed.")

        logger.info("mail_sent", to=to, status_code=response.status_code)
