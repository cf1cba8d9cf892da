"""
Outbound mail transport interface.
The credential issuer only needs "deliver this HTML to that address".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class InlineImage:
    """Image attached to a message and referenced from the HTML as cid:<content_id>."""

    content_id: str
    filename: str
    data: bytes
    mime_type: str = "image/png"


class MailTransport(ABC):
    """
    Interface for outbound mail delivery.

    Implementations:
    - SendGridMailer: SendGrid v3 API
    """

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        inline_images: Sequence[InlineImage] = (),
    ) -> None:
        """
        Deliver one message.

        Raises:
            DeliveryError: transport rejected the message, was unreachable,
                or did not answer within its timeout
        """
        pass
